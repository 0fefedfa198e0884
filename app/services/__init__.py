"""Service layer exports."""

from .calendar_sync import CalendarSyncService, build_calendar_event
from .errors import (
    ErrorKind,
    InvalidInputError,
    NotConnectedError,
    ProviderError,
    ServiceError,
    TokenExpiredError,
)
from .google_tokens import GoogleTokenService
from .session_assistant import SessionAssistantService
from .token_cipher import TokenCipherService

__all__ = [
    "CalendarSyncService",
    "ErrorKind",
    "GoogleTokenService",
    "InvalidInputError",
    "NotConnectedError",
    "ProviderError",
    "ServiceError",
    "SessionAssistantService",
    "TokenCipherService",
    "TokenExpiredError",
    "build_calendar_event",
]
