"""Expose constructed client wrappers."""

from .credential_store import CredentialStore
from .gemini import GeminiClient
from .google_auth import GoogleOAuthClient, TokenGrant
from .google_calendar import GoogleCalendarClient

__all__ = [
    "CredentialStore",
    "GeminiClient",
    "GoogleCalendarClient",
    "GoogleOAuthClient",
    "TokenGrant",
]
