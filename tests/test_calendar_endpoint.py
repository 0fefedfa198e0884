try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timedelta, timezone

import httplib2
import httpx
import pytest
from google.auth.exceptions import TransportError

from app.clients.google_calendar import (
    CalendarAccessRevokedError,
    CalendarRequestError,
    GoogleCalendarClient,
)
from app.main import app

pytestmark = pytest.mark.anyio


class StubCalendarClient:
    def __init__(self) -> None:
        self.inserted: list[dict] = []
        self.deleted: list[str] = []
        self.error: Exception | None = None

    async def insert_event(self, *, credentials, event):
        if self.error is not None:
            raise self.error
        self.inserted.append(event)
        return {"id": f"g-{len(self.inserted)}", "htmlLink": "https://calendar.google.com/e"}

    async def update_event(self, *, credentials, event_id, event):
        if self.error is not None:
            raise self.error
        return {"id": event_id, "htmlLink": "https://calendar.google.com/u"}

    async def delete_event(self, *, credentials, event_id):
        if self.error is not None:
            raise self.error
        self.deleted.append(event_id)


class NoRefreshOAuthClient:
    async def refresh_token(self, refresh_token: str):  # pragma: no cover - guard
        raise AssertionError("fresh tokens must not be refreshed")


@pytest.fixture()
def overrides(credential_store, cipher):
    from app import dependencies

    calendar = StubCalendarClient()
    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_credential_store: lambda: credential_store,
            dependencies.get_token_cipher_service: lambda: cipher,
            dependencies.get_google_oauth_client: lambda: NoRefreshOAuthClient(),
            dependencies.get_calendar_client: lambda: calendar,
        }
    )

    yield calendar, credential_store, cipher

    app.dependency_overrides.clear()


def _connect(store, cipher, user_id: str) -> None:
    expiry = datetime.now(timezone.utc) + timedelta(hours=1)
    store.put(
        user_id,
        cipher.seal(
            {
                "access_token": "access",
                "refresh_token": "refresh",
                "expiry_date": expiry.isoformat(),
                "token_type": "Bearer",
                "scope": "https://www.googleapis.com/auth/calendar.events",
                "connected_at": datetime.now(timezone.utc).isoformat(),
            }
        ),
    )


async def _post(payload: dict) -> httpx.Response:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    ) as client:
        return await client.post("/api/google-calendar", json=payload)


@pytest.mark.parametrize("action", ["status", "create", "update", "delete"])
async def test_unconnected_user_gets_not_connected(overrides, action):
    calendar, _, _ = overrides

    response = await _post({"userId": "stranger", "action": action})

    assert response.status_code == 401
    assert response.json()["error"] == "NOT_CONNECTED"
    assert calendar.inserted == [] and calendar.deleted == []


async def test_missing_user_id_is_bad_request(overrides):
    response = await _post({"action": "status"})

    assert response.status_code == 400
    assert response.json() == {"error": "INVALID_INPUT", "message": "Missing userId"}


async def test_status_for_connected_user(overrides):
    _, store, cipher = overrides
    _connect(store, cipher, "user-1")

    response = await _post({"userId": "user-1", "action": "status"})

    assert response.status_code == 200
    assert response.json()["connected"] is True


async def test_create_returns_event_per_todo(overrides):
    calendar, store, cipher = overrides
    _connect(store, cipher, "user-1")

    response = await _post(
        {
            "userId": "user-1",
            "action": "create",
            "sessionType": "Coaching",
            "todos": [
                {
                    "id": "todo-a",
                    "title": "Call mentor",
                    "description": "Ask about next steps.",
                    "priority": "medium",
                    "dueDate": "2025-05-01",
                },
                {
                    "id": "todo-b",
                    "title": "Walk outside",
                    "priority": "low",
                    "dueDate": "2025-05-02",
                },
            ],
        }
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "2 event(s) added to Google Calendar"
    assert [(e["todoId"], e["googleEventId"]) for e in body["events"]] == [
        ("todo-a", "g-1"),
        ("todo-b", "g-2"),
    ]
    assert calendar.inserted[0]["start"] == {"date": "2025-05-01"}
    assert "Session: Coaching" in calendar.inserted[0]["description"]


async def test_delete_without_event_id(overrides):
    calendar, store, cipher = overrides
    _connect(store, cipher, "user-1")

    response = await _post({"userId": "user-1", "action": "delete"})

    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_INPUT"
    assert calendar.deleted == []


async def test_malformed_todo_is_bad_request(overrides):
    _, store, cipher = overrides
    _connect(store, cipher, "user-1")

    response = await _post(
        {
            "userId": "user-1",
            "action": "create",
            "todos": [{"title": "No due date"}],
        }
    )

    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_INPUT"


async def test_revoked_access_deletes_record(overrides):
    calendar, store, cipher = overrides
    _connect(store, cipher, "user-1")
    calendar.error = CalendarAccessRevokedError("401 invalid credentials")

    response = await _post(
        {"userId": "user-1", "action": "delete", "googleEventId": "g-1"}
    )

    assert response.status_code == 401
    assert response.json()["error"] == "TOKEN_EXPIRED"
    assert store.get("user-1") is None


async def test_provider_failure_is_calendar_error(overrides):
    calendar, store, cipher = overrides
    _connect(store, cipher, "user-1")
    calendar.error = CalendarRequestError("500 backendError")

    response = await _post(
        {
            "userId": "user-1",
            "action": "update",
            "googleEventId": "g-1",
            "todo": {"id": 1, "title": "Retitled", "dueDate": "2025-05-03"},
        }
    )

    assert response.status_code == 500
    assert response.json()["error"] == "CALENDAR_ERROR"
    assert store.get("user-1") is not None


@pytest.mark.parametrize(
    "error",
    [
        httplib2.ServerNotFoundError("Unable to find the server at www.googleapis.com"),
        TransportError("connection reset"),
    ],
)
async def test_network_failure_is_calendar_error_json(overrides, monkeypatch, error):
    from app import dependencies
    from app.clients import google_calendar

    _, store, cipher = overrides
    _connect(store, cipher, "user-1")

    def failing_build(*args, **kwargs):
        raise error

    monkeypatch.setattr(google_calendar, "build", failing_build)
    app.dependency_overrides[dependencies.get_calendar_client] = (
        lambda: GoogleCalendarClient()
    )

    response = await _post(
        {
            "userId": "user-1",
            "action": "create",
            "todos": [{"id": "t1", "title": "Stretch", "dueDate": "2025-05-01"}],
        }
    )

    assert response.status_code == 500
    assert response.json()["error"] == "CALENDAR_ERROR"
    assert store.get("user-1") is not None
