"""
Application configuration models and helpers.

Centralizes settings management so route handlers and service factories share
a consistent configuration surface.
"""

from functools import lru_cache
from typing import Annotated, Optional

from pydantic import AnyHttpUrl, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class _EnvSettings(BaseSettings):
    """Base class reading values from the process environment and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class GoogleSettings(_EnvSettings):
    """Configuration required for interacting with Google APIs."""

    client_id: str = Field(..., validation_alias="GOOGLE_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="GOOGLE_CLIENT_SECRET")
    redirect_uri: AnyHttpUrl = Field(..., validation_alias="GOOGLE_REDIRECT_URI")
    calendar_id: str = Field(
        "primary",
        validation_alias="GOOGLE_CALENDAR_ID",
        description="Calendar that receives events created from action items.",
    )


class SecuritySettings(_EnvSettings):
    """Security-related configuration."""

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )


class GeminiSettings(_EnvSettings):
    """Configuration for Gemini model access."""

    api_key: str = Field(..., validation_alias="GEMINI_API_KEY")
    model_name: str = Field("gemini-1.5-pro", validation_alias="GEMINI_MODEL_NAME")
    vision_model_name: str = Field(
        "gemini-1.5-flash", validation_alias="GEMINI_VISION_MODEL_NAME"
    )


class OAuthSettings(_EnvSettings):
    """OAuth flow configuration."""

    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("https://www.googleapis.com/auth/calendar.events",),
        validation_alias="OAUTH_SCOPES",
    )
    refresh_window_seconds: int = Field(
        300,
        validation_alias="OAUTH_REFRESH_WINDOW_SECONDS",
        description="Refresh access tokens this many seconds before they expire.",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class AppSettings(_EnvSettings):
    """Root settings object for the FastAPI application."""

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    frontend_base_url: HttpUrl = Field(
        "https://tryvirgil.co/",
        validation_alias="FRONTEND_BASE_URL",
        description="Front-end page that OAuth callbacks redirect back to.",
    )
    credential_db_path: str = Field(
        "data/virgil.db",
        validation_alias="CREDENTIAL_DB_PATH",
        description="SQLite database holding per-user Google credentials.",
    )
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)
    gemini: GeminiSettings = Field(default_factory=GeminiSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "GeminiSettings",
    "GoogleSettings",
    "OAuthSettings",
    "SecuritySettings",
    "get_settings",
]
