"""Pytest configuration shared across the suite."""

import pytest

try:
    from . import _bootstrap  # noqa: F401
except ImportError:  # pragma: no cover - tests collected as rootdir modules
    import _bootstrap  # type: ignore # noqa: F401

from app.clients.credential_store import CredentialStore
from app.services.token_cipher import TokenCipherService


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def credential_store(tmp_path) -> CredentialStore:
    """A throwaway SQLite credential store per test."""
    return CredentialStore(str(tmp_path / "credentials.db"))


@pytest.fixture
def cipher() -> TokenCipherService:
    return TokenCipherService(secret="test-secret")
