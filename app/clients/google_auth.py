"""
Google OAuth utilities.

These helpers build the consent URL and talk to the token endpoint for the
code exchange and refresh grants.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import status

from app.core.config import GoogleSettings, OAuthSettings

logger = logging.getLogger(__name__)


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""


@dataclass(frozen=True, slots=True)
class TokenGrant:
    """Token endpoint response, reduced to the fields we persist."""

    access_token: str
    expires_in: int
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None


class GoogleOAuthClient:
    """Build Google authorization URLs and exchange authorization codes."""

    AUTH_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        google_settings: GoogleSettings,
        oauth_settings: OAuthSettings,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._google = google_settings
        self._oauth = oauth_settings
        self._timeout = timeout
        self._transport = transport

    def build_authorization_url(self, state: str) -> str:
        """Construct the consent URL; ``prompt=consent`` forces a refresh token."""
        params = {
            "client_id": self._google.client_id,
            "redirect_uri": str(self._google.redirect_uri),
            "response_type": "code",
            "scope": " ".join(self._oauth.scopes),
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> TokenGrant:
        """Exchange an authorization code for an access/refresh token pair."""
        payload = await self._post_token_request(
            {
                "code": code,
                "client_id": self._google.client_id,
                "client_secret": self._google.client_secret,
                "redirect_uri": str(self._google.redirect_uri),
                "grant_type": "authorization_code",
            }
        )
        grant = _grant_from_payload(payload)
        if not grant.refresh_token:
            raise OAuthTokenExchangeError("Token payload is missing a refresh token.")
        return grant

    async def refresh_token(self, refresh_token: str) -> TokenGrant:
        """Obtain a new access token using a stored refresh token."""
        payload = await self._post_token_request(
            {
                "client_id": self._google.client_id,
                "client_secret": self._google.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            }
        )
        return _grant_from_payload(payload)

    async def _post_token_request(self, form: dict[str, str]) -> dict:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(self.TOKEN_URL, data=form)
        except httpx.HTTPError as exc:
            raise OAuthTokenExchangeError(f"Token endpoint unreachable: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            logger.warning(
                "Token endpoint rejected %s grant with status %s",
                form.get("grant_type"),
                response.status_code,
            )
            raise OAuthTokenExchangeError(response.text)

        try:
            return response.json()
        except ValueError as exc:
            raise OAuthTokenExchangeError("Token endpoint returned invalid JSON.") from exc


def _grant_from_payload(payload: dict) -> TokenGrant:
    access_token = payload.get("access_token")
    expires_in = payload.get("expires_in")
    if not access_token or not expires_in:
        raise OAuthTokenExchangeError("Incomplete token payload returned from Google.")
    try:
        lifetime = int(expires_in)
    except (TypeError, ValueError) as exc:
        raise OAuthTokenExchangeError(f"Invalid expires_in value: {expires_in!r}") from exc
    return TokenGrant(
        access_token=access_token,
        expires_in=lifetime,
        refresh_token=payload.get("refresh_token"),
        token_type=payload.get("token_type"),
        scope=payload.get("scope"),
    )


__all__ = [
    "GoogleOAuthClient",
    "OAuthTokenExchangeError",
    "TokenGrant",
]
