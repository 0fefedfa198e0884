"""Service that mirrors session action items onto the user's Google Calendar."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from google.oauth2.credentials import Credentials

from app.clients.google_calendar import (
    CalendarAccessRevokedError,
    CalendarRequestError,
    GoogleCalendarClient,
)
from app.schemas.calendar import CalendarActionRequest, CreatedEvent, TodoItem
from app.services.errors import InvalidInputError, ProviderError, TokenExpiredError
from app.services.google_tokens import GoogleTokenService

logger = logging.getLogger(__name__)

PRIORITY_EMOJI = {
    "high": "🔴",
    "medium": "🟡",
    "low": "🟢",
}

ATTRIBUTION_LINE = "— Created by Virgil"

# 9 AM on the due date, counted back from the all-day event's midnight start.
REMINDER_MINUTES = 9 * 60

VALID_ACTIONS = ("create", "delete", "update", "status")

CALENDAR_ERROR_CODE = "CALENDAR_ERROR"


def build_calendar_event(
    todo: TodoItem,
    session_type: Optional[str] = None,
    *,
    with_reminder: bool = True,
) -> Dict[str, Any]:
    """Translate an action item into a Calendar API all-day event body."""
    priority = todo.priority or ""
    priority_line = " ".join(
        part for part in ("Priority:", PRIORITY_EMOJI.get(priority, ""), priority) if part
    )
    lines = [
        todo.description,
        priority_line,
        f"Session: {session_type}" if session_type else None,
        ATTRIBUTION_LINE,
    ]

    event: Dict[str, Any] = {
        "summary": f"✅ {todo.title}",
        "description": "\n".join(line for line in lines if line),
        "start": {"date": todo.due_date.isoformat()},
        # All-day end dates are exclusive.
        "end": {"date": (todo.due_date + timedelta(days=1)).isoformat()},
    }
    if with_reminder:
        event["reminders"] = {
            "useDefault": False,
            "overrides": [{"method": "popup", "minutes": REMINDER_MINUTES}],
        }
    return event


class CalendarSyncService:
    """Dispatch calendar actions for a user after resolving their credentials."""

    def __init__(
        self,
        token_service: GoogleTokenService,
        calendar_client: GoogleCalendarClient,
    ) -> None:
        self._tokens = token_service
        self._calendar = calendar_client

    async def handle(self, request: CalendarActionRequest) -> Dict[str, Any]:
        """Run one calendar action and return its JSON-ready response."""
        if not request.user_id:
            raise InvalidInputError("Missing userId")

        user_id = request.user_id
        credentials = await self._tokens.resolve_credentials(user_id=user_id)

        try:
            if request.action == "create":
                return await self._create(user_id, credentials, request)
            if request.action == "delete":
                return await self._delete(credentials, request)
            if request.action == "update":
                return await self._update(credentials, request)
            if request.action == "status":
                return {"connected": True, "message": "Google Calendar is connected"}
        except CalendarAccessRevokedError as exc:
            logger.warning("Calendar access revoked for user %s: %s", user_id, exc)
            self._tokens.disconnect(user_id=user_id)
            raise TokenExpiredError(
                "Google Calendar access was revoked. Please reconnect."
            ) from exc
        except CalendarRequestError as exc:
            logger.error("Google Calendar API error for user %s: %s", user_id, exc)
            raise ProviderError(
                "Failed to sync with Google Calendar. Please try again.",
                code=CALENDAR_ERROR_CODE,
            ) from exc

        raise InvalidInputError(f"Invalid action. Use: {', '.join(VALID_ACTIONS)}")

    async def _create(
        self,
        user_id: str,
        credentials: Credentials,
        request: CalendarActionRequest,
    ) -> Dict[str, Any]:
        if not request.todos:
            raise InvalidInputError("No action items provided")

        results: list[CreatedEvent] = []
        for todo in request.todos:
            event = build_calendar_event(todo, request.session_type)
            try:
                created = await self._calendar.insert_event(
                    credentials=credentials, event=event
                )
            except CalendarRequestError:
                logger.error(
                    "Insert aborted for user %s after %d of %d events",
                    user_id,
                    len(results),
                    len(request.todos),
                )
                raise
            results.append(
                CreatedEvent(
                    todo_id=todo.id,
                    google_event_id=created["id"],
                    html_link=created.get("htmlLink"),
                )
            )

        return {
            "success": True,
            "message": f"{len(results)} event(s) added to Google Calendar",
            "events": [result.model_dump(by_alias=True) for result in results],
        }

    async def _delete(
        self, credentials: Credentials, request: CalendarActionRequest
    ) -> Dict[str, Any]:
        if not request.google_event_id:
            raise InvalidInputError("Missing googleEventId")

        await self._calendar.delete_event(
            credentials=credentials, event_id=request.google_event_id
        )
        return {"success": True, "message": "Event removed from Google Calendar"}

    async def _update(
        self, credentials: Credentials, request: CalendarActionRequest
    ) -> Dict[str, Any]:
        if not request.google_event_id or request.todo is None:
            raise InvalidInputError("Missing googleEventId or todo data")

        event = build_calendar_event(
            request.todo, request.session_type, with_reminder=False
        )
        updated = await self._calendar.update_event(
            credentials=credentials,
            event_id=request.google_event_id,
            event=event,
        )
        return {
            "success": True,
            "googleEventId": updated.get("id", request.google_event_id),
            "htmlLink": updated.get("htmlLink"),
        }


__all__ = [
    "ATTRIBUTION_LINE",
    "CalendarSyncService",
    "PRIORITY_EMOJI",
    "REMINDER_MINUTES",
    "VALID_ACTIONS",
    "build_calendar_event",
]
