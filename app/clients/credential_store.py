"""SQLite-backed storage for per-user Google credential records."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional


class CredentialStore:
    """Keep at most one credential document per user identifier."""

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS google_tokens (
                    user_id TEXT PRIMARY KEY,
                    data TEXT NOT NULL
                )
                """
            )

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM google_tokens WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        if not row:
            return None
        return json.loads(row["data"])

    def put(self, user_id: str, record: Dict[str, Any]) -> None:
        """Store a record, replacing whatever the user had before."""
        if not user_id:
            raise ValueError("Credential records require a user identifier")

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO google_tokens (user_id, data)
                VALUES (?, ?)
                ON CONFLICT(user_id) DO UPDATE SET data = excluded.data
                """,
                (user_id, json.dumps(record)),
            )

    def update(self, user_id: str, fields: Dict[str, Any]) -> None:
        """Merge fields into an existing record; missing records stay missing."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM google_tokens WHERE user_id = ?",
                (user_id,),
            ).fetchone()
            if not row:
                return
            record = json.loads(row["data"])
            record.update(fields)
            conn.execute(
                "UPDATE google_tokens SET data = ? WHERE user_id = ?",
                (json.dumps(record), user_id),
            )

    def delete(self, user_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM google_tokens WHERE user_id = ?", (user_id,))


__all__ = ["CredentialStore"]
