"""SQLite-backed key-value storage for local app state."""

from __future__ import annotations

import logging
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from .errors import PersistenceUnavailable

SCHEMA_VERSION = 1

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Durable string values under fixed keys, scoped to one data directory."""

    def __init__(self, db_path: Path | str) -> None:
        """Open the database and bring its schema up to date."""
        target = str(db_path)
        try:
            if isinstance(db_path, Path):
                db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(target)
            self._conn.row_factory = sqlite3.Row
            self._apply_migrations()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceUnavailable(f"Could not open storage at {target}: {exc}") from exc

    def _apply_migrations(self) -> None:
        """Apply forward-only schema migrations to latest version."""
        current = int(self._conn.execute("PRAGMA user_version").fetchone()[0])
        if current > SCHEMA_VERSION:
            self._conn.close()
            raise PersistenceUnavailable(
                f"Database schema version {current} is newer than supported {SCHEMA_VERSION}."
            )

        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """)

        for version in range(current + 1, SCHEMA_VERSION + 1):
            if version == 1:
                self._migrate_to_v1()
            with self._conn:
                self._conn.execute(f"PRAGMA user_version = {version}")
                self._conn.execute(
                    "INSERT OR REPLACE INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                    (version, datetime.now(UTC).isoformat()),
                )
            logger.info("Storage schema migrated to version %d", version)

    def _migrate_to_v1(self) -> None:
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """)

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        try:
            row = self._conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        except sqlite3.Error as exc:
            raise PersistenceUnavailable(f"Could not read '{key}': {exc}") from exc
        if row is None:
            return None
        return str(row["value"])

    def set(self, key: str, value: str) -> None:
        """Insert or replace one value."""
        now = datetime.now(UTC).isoformat()
        try:
            with self._conn:
                self._conn.execute(
                    """
                    INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, now),
                )
        except sqlite3.Error as exc:
            raise PersistenceUnavailable(f"Could not write '{key}': {exc}") from exc

    def delete(self, key: str) -> bool:
        """Remove a key; returns whether it existed."""
        try:
            with self._conn:
                cursor = self._conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise PersistenceUnavailable(f"Could not delete '{key}': {exc}") from exc
        return cursor.rowcount > 0

    def close(self) -> None:
        """Close db connection."""
        self._conn.close()

    def __del__(self) -> None:  # pragma: no cover
        """Best-effort connection cleanup."""
        try:
            self.close()
        except Exception:
            pass
