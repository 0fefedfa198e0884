"""Symmetric encryption for the token fields of stored credential records."""

from __future__ import annotations

import base64
import hashlib
from typing import Any, Dict

from cryptography.fernet import Fernet, InvalidToken

SEALED_FIELDS: tuple[str, ...] = ("access_token", "refresh_token")


class TokenCipherService:
    """Encrypt and decrypt token strings using a Fernet key derived from a secret."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Failed to decrypt token; invalid ciphertext provided."
            ) from exc
        return plaintext.decode("utf-8")

    def seal(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``record`` with its token fields encrypted."""
        sealed = dict(record)
        for field in SEALED_FIELDS:
            if sealed.get(field):
                sealed[field] = self.encrypt(sealed[field])
        return sealed

    def unseal(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``record`` with its token fields decrypted."""
        opened = dict(record)
        for field in SEALED_FIELDS:
            if opened.get(field):
                opened[field] = self.decrypt(opened[field])
        return opened


__all__ = ["SEALED_FIELDS", "TokenCipherService"]
