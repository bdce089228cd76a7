"""Durable key/value slots backing the pending-endorsement vault."""

import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

from ..errors import PersistenceError


class SlotStorage(ABC):
    """String slots addressed by a stable key."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the slot is empty."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Overwrite the slot; raises PersistenceError on failure."""
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """Empty the slot; returns False if removal failed."""
        pass


class MemorySlotStorage(SlotStorage):
    """Process-local slots; survives nothing, used for tests and embedding."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> bool:
        self._values.pop(key, None)
        return True


class SqliteSlotStorage(SlotStorage):
    """SQLite-based slots that outlive the process."""

    def __init__(self, db_path: str = "endorse_vault.db"):
        self.db_path = Path(db_path)
        self.logger = structlog.get_logger("endorse.slot_store")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        try:
            with self._get_connection() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS slots (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                """)
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(
                f"Failed to initialize slot store: {e}",
                operation="init",
                target=str(self.db_path)
            ) from e

    @contextmanager
    def _get_connection(self):
        """Get database connection with proper error handling."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", error=str(e), db_path=str(self.db_path))
            raise
        finally:
            if conn:
                conn.close()

    def get(self, key: str) -> Optional[str]:
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT value FROM slots WHERE key = ?", (key,)
                ).fetchone()
                return row[0] if row else None

        except sqlite3.Error as e:
            self.logger.error("Failed to read slot", key=key, error=str(e))
            return None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            try:
                with self._get_connection() as conn:
                    conn.execute("""
                        INSERT OR REPLACE INTO slots (key, value, updated_at)
                        VALUES (?, ?, ?)
                    """, (key, value, datetime.now(timezone.utc).isoformat()))
                    conn.commit()

            except sqlite3.Error as e:
                raise PersistenceError(
                    f"Failed to write slot {key}: {e}",
                    operation="write",
                    target=key
                ) from e

        self.logger.debug("Slot written", key=key, size=len(value))

    def remove(self, key: str) -> bool:
        with self._lock:
            try:
                with self._get_connection() as conn:
                    conn.execute("DELETE FROM slots WHERE key = ?", (key,))
                    conn.commit()
                    return True

            except sqlite3.Error as e:
                self.logger.error("Failed to remove slot", key=key, error=str(e))
                return False
