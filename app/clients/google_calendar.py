"""Google Calendar client wrapper for action-item events."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict

from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

logger = logging.getLogger(__name__)

_REVOKED_STATUSES = frozenset({401, 403})


class CalendarRequestError(Exception):
    """Raised when the Calendar API rejects or fails a request."""


class CalendarAccessRevokedError(CalendarRequestError):
    """Raised when Google reports the user's grant as revoked or insufficient."""


class GoogleCalendarClient:
    """Insert, update, and delete events on a user's calendar."""

    def __init__(self, calendar_id: str = "primary") -> None:
        self._calendar_id = calendar_id

    async def insert_event(
        self, *, credentials: Credentials, event: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Create an event and return the resource Google assigned."""
        return await self._execute(
            credentials,
            lambda events: events.insert(calendarId=self._calendar_id, body=event),
        )

    async def update_event(
        self, *, credentials: Credentials, event_id: str, event: Dict[str, Any]
    ) -> Dict[str, Any]:
        return await self._execute(
            credentials,
            lambda events: events.update(
                calendarId=self._calendar_id, eventId=event_id, body=event
            ),
        )

    async def delete_event(self, *, credentials: Credentials, event_id: str) -> None:
        await self._execute(
            credentials,
            lambda events: events.delete(calendarId=self._calendar_id, eventId=event_id),
        )

    async def _execute(
        self, credentials: Credentials, request: Callable[[Any], Any]
    ) -> Any:
        def _run() -> Any:
            try:
                service = build(
                    "calendar", "v3", credentials=credentials, cache_discovery=False
                )
                return request(service.events()).execute()
            except HttpError as exc:
                status = exc.resp.status if exc.resp is not None else None
                logger.warning("Calendar API returned status %s: %s", status, exc)
                if status in _REVOKED_STATUSES:
                    raise CalendarAccessRevokedError(str(exc)) from exc
                raise CalendarRequestError(str(exc)) from exc
            except RefreshError as exc:
                raise CalendarAccessRevokedError(str(exc)) from exc
            except (TransportError, HttpLib2Error, OSError) as exc:
                logger.warning("Calendar API unreachable: %s", exc)
                raise CalendarRequestError(f"Calendar API unreachable: {exc}") from exc

        return await asyncio.to_thread(_run)


__all__ = [
    "CalendarAccessRevokedError",
    "CalendarRequestError",
    "GoogleCalendarClient",
]
