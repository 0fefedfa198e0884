"""
Helpers for persisting, resolving, and refreshing Google OAuth tokens.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from google.oauth2.credentials import Credentials

from app.clients.credential_store import CredentialStore
from app.clients.google_auth import GoogleOAuthClient, OAuthTokenExchangeError, TokenGrant
from app.core.config import GoogleSettings, OAuthSettings
from app.models.oauth import StoredCredential
from app.services.errors import NotConnectedError, TokenExpiredError
from app.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GoogleTokenService:
    """Manages the lifecycle of the per-user Google credential record."""

    def __init__(
        self,
        store: CredentialStore,
        oauth_client: GoogleOAuthClient,
        google_settings: GoogleSettings,
        oauth_settings: OAuthSettings,
        token_cipher: TokenCipherService,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._oauth = oauth_client
        self._google = google_settings
        self._oauth_settings = oauth_settings
        self._cipher = token_cipher
        self._clock = clock
        self._refresh_window = timedelta(seconds=oauth_settings.refresh_window_seconds)

    def connect(self, *, user_id: str, grant: TokenGrant) -> StoredCredential:
        """Persist a freshly exchanged token pair, replacing any prior record."""
        now = self._clock()
        credential = StoredCredential(
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expiry_date=now + timedelta(seconds=grant.expires_in),
            token_type=grant.token_type,
            scope=grant.scope,
            connected_at=now,
        )
        self._store.put(user_id, self._cipher.seal(credential.to_document()))
        logger.info("Stored Google credentials for user %s", user_id)
        return credential

    def disconnect(self, *, user_id: str) -> None:
        """Drop the user's record so the next request reports a reconnect."""
        self._store.delete(user_id)
        logger.info("Removed Google credentials for user %s", user_id)

    def load(self, *, user_id: str) -> StoredCredential:
        record = self._store.get(user_id)
        if not record:
            raise NotConnectedError()
        try:
            return StoredCredential.model_validate(self._cipher.unseal(record))
        except ValueError as exc:
            logger.warning("Unreadable credential record for user %s: %s", user_id, exc)
            self.disconnect(user_id=user_id)
            raise TokenExpiredError() from exc

    def needs_refresh(self, credential: StoredCredential) -> bool:
        if credential.expiry_date is None:
            return False
        return credential.expiry_date <= self._clock() + self._refresh_window

    async def resolve_credentials(self, *, user_id: str) -> Credentials:
        """Return usable credentials for a user, refreshing tokens when necessary.

        Raises ``NotConnectedError`` when nothing is stored and
        ``TokenExpiredError`` when the refresh grant fails, in which case the
        stored record has already been deleted.
        """
        credential = self.load(user_id=user_id)

        if self.needs_refresh(credential):
            credential = await self._refresh(user_id=user_id, credential=credential)

        return Credentials(
            token=credential.access_token,
            refresh_token=credential.refresh_token,
            token_uri=GoogleOAuthClient.TOKEN_URL,
            client_id=self._google.client_id,
            client_secret=self._google.client_secret,
            scopes=list(self._oauth_settings.scopes),
            expiry=_naive_utc(credential.expiry_date),
        )

    async def _refresh(
        self, *, user_id: str, credential: StoredCredential
    ) -> StoredCredential:
        if not credential.refresh_token:
            logger.warning("User %s has an expiring token but no refresh token", user_id)
            self.disconnect(user_id=user_id)
            raise TokenExpiredError()

        refreshed_at = self._clock()
        try:
            grant = await self._oauth.refresh_token(credential.refresh_token)
        except OAuthTokenExchangeError as exc:
            logger.error("Token refresh failed for user %s: %s", user_id, exc)
            self.disconnect(user_id=user_id)
            raise TokenExpiredError() from exc

        updated = credential.model_copy(
            update={
                "access_token": grant.access_token,
                "expiry_date": refreshed_at + timedelta(seconds=grant.expires_in),
            }
        )
        self._store.update(
            user_id,
            {
                "access_token": self._cipher.encrypt(updated.access_token),
                "expiry_date": updated.expiry_date.isoformat(),
            },
        )
        return updated


def _naive_utc(value: datetime | None) -> datetime | None:
    # google-auth compares expiry against a naive UTC timestamp.
    if value is None:
        return None
    return value.astimezone(timezone.utc).replace(tzinfo=None)


__all__ = ["GoogleTokenService"]
