"""Tagged error variants raised by the service layer."""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus


class ErrorKind(str, Enum):
    """Closed set of failure categories surfaced to API callers."""

    INVALID_INPUT = "INVALID_INPUT"
    NOT_CONNECTED = "NOT_CONNECTED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    PROVIDER_ERROR = "PROVIDER_ERROR"


_STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: HTTPStatus.BAD_REQUEST,
    ErrorKind.NOT_CONNECTED: HTTPStatus.UNAUTHORIZED,
    ErrorKind.TOKEN_EXPIRED: HTTPStatus.UNAUTHORIZED,
    ErrorKind.PROVIDER_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
}


class ServiceError(Exception):
    """Base class carrying an error kind, a wire code, and optional detail."""

    kind: ErrorKind = ErrorKind.PROVIDER_ERROR
    default_detail: str = "Unexpected error."

    def __init__(self, detail: str | None = None, *, code: str | None = None) -> None:
        self.detail = detail or self.default_detail
        self.code = code or self.kind.value
        super().__init__(self.detail)

    @property
    def status_code(self) -> HTTPStatus:
        return _STATUS_BY_KIND[self.kind]

    def to_payload(self) -> dict[str, str]:
        return {"error": self.code, "message": self.detail}


class InvalidInputError(ServiceError):
    """A required field is missing or malformed."""

    kind = ErrorKind.INVALID_INPUT
    default_detail = "Invalid request."


class CalendarAuthError(ServiceError):
    """The user must (re)connect their Google account."""


class NotConnectedError(CalendarAuthError):
    kind = ErrorKind.NOT_CONNECTED
    default_detail = "Google Calendar is not connected. Please connect your account."


class TokenExpiredError(CalendarAuthError):
    kind = ErrorKind.TOKEN_EXPIRED
    default_detail = "Your Google Calendar connection has expired. Please reconnect."


class ProviderError(ServiceError):
    """An upstream provider call failed; details are only logged."""

    kind = ErrorKind.PROVIDER_ERROR
    default_detail = "The upstream provider request failed. Please try again."


__all__ = [
    "CalendarAuthError",
    "ErrorKind",
    "InvalidInputError",
    "NotConnectedError",
    "ProviderError",
    "ServiceError",
    "TokenExpiredError",
]
