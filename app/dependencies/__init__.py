"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_app_settings,
    get_calendar_client,
    get_calendar_sync_service,
    get_credential_store,
    get_gemini_client,
    get_google_oauth_client,
    get_google_token_service,
    get_session_assistant_service,
    get_token_cipher_service,
)

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
