"""
Factories providing settings, clients, and services as FastAPI dependencies.

Services are assembled through ``Depends`` so an override registered for any
collaborator (for example the credential store) also reaches the services
built on top of it.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.clients import (
    CredentialStore,
    GeminiClient,
    GoogleCalendarClient,
    GoogleOAuthClient,
)
from app.core.config import AppSettings, get_settings
from app.services import (
    CalendarSyncService,
    GoogleTokenService,
    SessionAssistantService,
    TokenCipherService,
)


def get_app_settings() -> AppSettings:
    """FastAPI dependency returning application settings."""
    return get_settings()


@lru_cache()
def get_google_oauth_client() -> GoogleOAuthClient:
    """Create a singleton Google OAuth client."""
    settings = get_settings()
    return GoogleOAuthClient(settings.google, settings.oauth)


@lru_cache()
def get_credential_store() -> CredentialStore:
    """Provide the SQLite credential store."""
    return CredentialStore(get_settings().credential_db_path)


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for token storage."""
    settings = get_settings()
    secret = settings.security.token_encryption_secret or settings.google.client_secret
    return TokenCipherService(secret=secret)


@lru_cache()
def get_calendar_client() -> GoogleCalendarClient:
    return GoogleCalendarClient(calendar_id=get_settings().google.calendar_id)


@lru_cache()
def get_gemini_client() -> GeminiClient:
    """Provide Gemini client instance."""
    return GeminiClient(get_settings().gemini)


def get_google_token_service(
    settings: Annotated[AppSettings, Depends(get_app_settings)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
    oauth_client: Annotated[GoogleOAuthClient, Depends(get_google_oauth_client)],
    token_cipher: Annotated[TokenCipherService, Depends(get_token_cipher_service)],
) -> GoogleTokenService:
    """Build the token lifecycle service over the configured store."""
    return GoogleTokenService(
        store=store,
        oauth_client=oauth_client,
        google_settings=settings.google,
        oauth_settings=settings.oauth,
        token_cipher=token_cipher,
    )


def get_calendar_sync_service(
    token_service: Annotated[GoogleTokenService, Depends(get_google_token_service)],
    calendar_client: Annotated[GoogleCalendarClient, Depends(get_calendar_client)],
) -> CalendarSyncService:
    return CalendarSyncService(
        token_service=token_service,
        calendar_client=calendar_client,
    )


def get_session_assistant_service(
    gemini_client: Annotated[GeminiClient, Depends(get_gemini_client)],
) -> SessionAssistantService:
    """Build the session assistant using Gemini."""
    return SessionAssistantService(gemini_client)


__all__ = [
    "get_app_settings",
    "get_calendar_client",
    "get_calendar_sync_service",
    "get_credential_store",
    "get_gemini_client",
    "get_google_oauth_client",
    "get_google_token_service",
    "get_session_assistant_service",
    "get_token_cipher_service",
]
