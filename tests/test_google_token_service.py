from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from datetime import datetime, timedelta, timezone

import pytest

from app.clients.google_auth import OAuthTokenExchangeError, TokenGrant
from app.core.config import GoogleSettings, OAuthSettings
from app.services.errors import NotConnectedError, TokenExpiredError
from app.services.google_tokens import GoogleTokenService

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


class DummyOAuthClient:
    def __init__(self, *, refreshed_token: str = "refreshed-access", fail: bool = False) -> None:
        self.refreshed_token = refreshed_token
        self.fail = fail
        self.calls: list[str] = []

    async def refresh_token(self, refresh_token: str) -> TokenGrant:
        self.calls.append(refresh_token)
        if self.fail:
            raise OAuthTokenExchangeError("invalid_grant")
        return TokenGrant(access_token=self.refreshed_token, expires_in=3600)


def _settings() -> tuple[GoogleSettings, OAuthSettings]:
    google = GoogleSettings(
        GOOGLE_CLIENT_ID="client",
        GOOGLE_CLIENT_SECRET="secret",
        GOOGLE_REDIRECT_URI="https://example.com/callback",
    )
    return google, OAuthSettings()


def _service(store, cipher, oauth_client) -> GoogleTokenService:
    google, oauth = _settings()
    return GoogleTokenService(
        store=store,
        oauth_client=oauth_client,
        google_settings=google,
        oauth_settings=oauth,
        token_cipher=cipher,
        clock=lambda: NOW,
    )


def _seed(store, cipher, user_id: str, *, expires_at: datetime | None) -> None:
    store.put(
        user_id,
        cipher.seal(
            {
                "access_token": "initial-token",
                "refresh_token": "refresh-token",
                "expiry_date": expires_at.isoformat() if expires_at else None,
                "token_type": "Bearer",
                "scope": "https://www.googleapis.com/auth/calendar.events",
                "connected_at": (NOW - timedelta(days=2)).isoformat(),
            }
        ),
    )


@pytest.mark.asyncio
async def test_missing_record_reports_not_connected(credential_store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    service = _service(credential_store, cipher, oauth_client)

    with pytest.raises(NotConnectedError):
        await service.resolve_credentials(user_id="nobody")

    assert oauth_client.calls == []


@pytest.mark.asyncio
async def test_fresh_token_is_used_without_refresh(credential_store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    _seed(credential_store, cipher, "u1", expires_at=NOW + timedelta(minutes=30))
    before = credential_store.get("u1")

    service = _service(credential_store, cipher, oauth_client)
    credentials = await service.resolve_credentials(user_id="u1")

    assert credentials.token == "initial-token"
    assert credentials.refresh_token == "refresh-token"
    assert oauth_client.calls == []
    assert credential_store.get("u1") == before


@pytest.mark.asyncio
async def test_expired_token_refreshes_and_updates_storage(credential_store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    _seed(credential_store, cipher, "u2", expires_at=NOW - timedelta(minutes=1))

    service = _service(credential_store, cipher, oauth_client)
    credentials = await service.resolve_credentials(user_id="u2")

    assert credentials.token == "refreshed-access"
    assert oauth_client.calls == ["refresh-token"]

    stored = credential_store.get("u2")
    assert cipher.decrypt(stored["access_token"]) == "refreshed-access"
    assert cipher.decrypt(stored["refresh_token"]) == "refresh-token"
    assert datetime.fromisoformat(stored["expiry_date"]) == NOW + timedelta(hours=1)


@pytest.mark.asyncio
async def test_token_inside_refresh_window_is_refreshed_once(credential_store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    _seed(credential_store, cipher, "u3", expires_at=NOW + timedelta(minutes=4))

    service = _service(credential_store, cipher, oauth_client)
    await service.resolve_credentials(user_id="u3")

    assert oauth_client.calls == ["refresh-token"]


@pytest.mark.asyncio
async def test_failed_refresh_deletes_record(credential_store, cipher) -> None:
    oauth_client = DummyOAuthClient(fail=True)
    _seed(credential_store, cipher, "u4", expires_at=NOW - timedelta(hours=1))

    service = _service(credential_store, cipher, oauth_client)
    with pytest.raises(TokenExpiredError):
        await service.resolve_credentials(user_id="u4")

    assert oauth_client.calls == ["refresh-token"]
    assert credential_store.get("u4") is None


@pytest.mark.asyncio
async def test_record_without_expiry_is_used_as_is(credential_store, cipher) -> None:
    oauth_client = DummyOAuthClient()
    _seed(credential_store, cipher, "u5", expires_at=None)

    service = _service(credential_store, cipher, oauth_client)
    credentials = await service.resolve_credentials(user_id="u5")

    assert credentials.token == "initial-token"
    assert oauth_client.calls == []


def test_connect_stores_encrypted_record_and_overwrites(credential_store, cipher) -> None:
    service = _service(credential_store, cipher, DummyOAuthClient())
    _seed(credential_store, cipher, "u6", expires_at=NOW)

    service.connect(
        user_id="u6",
        grant=TokenGrant(
            access_token="new-access",
            refresh_token="new-refresh",
            expires_in=3599,
            token_type="Bearer",
            scope="https://www.googleapis.com/auth/calendar.events",
        ),
    )

    stored = credential_store.get("u6")
    assert stored["access_token"] != "new-access"
    assert cipher.decrypt(stored["access_token"]) == "new-access"
    assert cipher.decrypt(stored["refresh_token"]) == "new-refresh"
    assert stored["token_type"] == "Bearer"
    assert datetime.fromisoformat(stored["expiry_date"]) == NOW + timedelta(seconds=3599)
    assert datetime.fromisoformat(stored["connected_at"]) == NOW


@pytest.mark.asyncio
async def test_unreadable_record_is_discarded(credential_store, cipher) -> None:
    credential_store.put("u7", {"access_token": "plaintext", "refresh_token": "x"})

    service = _service(credential_store, cipher, DummyOAuthClient())
    with pytest.raises(TokenExpiredError):
        await service.resolve_credentials(user_id="u7")

    assert credential_store.get("u7") is None
