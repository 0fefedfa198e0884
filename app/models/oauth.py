"""
Domain models for Google credential persistence.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoredCredential(BaseModel):
    """The per-user record kept in the credential store (tokens in plaintext)."""

    access_token: str
    refresh_token: Optional[str] = None
    expiry_date: Optional[datetime] = Field(
        None, description="Absolute instant after which the access token is invalid."
    )
    token_type: Optional[str] = None
    scope: Optional[str] = None
    connected_at: datetime = Field(default_factory=_utcnow)

    @field_validator("expiry_date", "connected_at")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_document(self) -> dict:
        """Serialize into the JSON document shape written to storage."""
        return self.model_dump(mode="json")


__all__ = ["StoredCredential"]
