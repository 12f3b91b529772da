"""
SQLite key-value store implementation.

Single table keyed by the full key, using aiosqlite.
"""

from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from codegraph.core.store.base import KeyValueStore
from codegraph.utils.exceptions import RecordStoreError
from codegraph.utils.logger import get_logger

logger = get_logger(__name__)


class SQLiteKeyValueStore(KeyValueStore):
    """
    SQLite-based key-value store.

    Features:
    - Fast local storage
    - Prefix listing ordered by key
    - One transaction per write
    """

    def __init__(self, db_path: str = "data/codegraph.db"):
        """
        Initialize SQLite key-value store.

        Args:
            db_path: Path to SQLite database file (":memory:" for a private in-memory DB)
        """
        self.db_path = db_path
        self.connection: aiosqlite.Connection | None = None

        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    async def connect(self) -> None:
        """Establish connection to SQLite."""
        if self.connection is None:
            self.connection = await aiosqlite.connect(self.db_path)
            await self.connection.execute("PRAGMA journal_mode = WAL")
            await self.connection.commit()

    async def initialize(self) -> None:
        """Initialize database schema."""
        await self.connect()

        await self.connection.execute(
            """
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """
        )
        await self.connection.commit()

    async def get(self, key: str) -> str | None:
        await self.connect()

        cursor = await self.connection.execute("SELECT value FROM kv WHERE key = ?", (key,))
        row = await cursor.fetchone()
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        await self.connect()

        try:
            await self.connection.execute(
                "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, ?)",
                (key, value, datetime.now(UTC).isoformat()),
            )
            await self.connection.commit()
        except aiosqlite.Error as e:
            await self.connection.rollback()
            logger.error(f"SQLite write failed for {key}", extra={"key": key, "error": str(e)})
            raise RecordStoreError(f"Failed to write {key}: {e}", context={"key": key}) from e

    async def list(self, prefix: str) -> list[tuple[str, str]]:
        await self.connect()

        cursor = await self.connection.execute(
            "SELECT key, value FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
        )
        rows = await cursor.fetchall()
        return [(row[0], row[1]) for row in rows]

    async def delete(self, key: str) -> bool:
        await self.connect()

        try:
            cursor = await self.connection.execute("DELETE FROM kv WHERE key = ?", (key,))
            await self.connection.commit()
        except aiosqlite.Error as e:
            await self.connection.rollback()
            raise RecordStoreError(f"Failed to delete {key}: {e}", context={"key": key}) from e
        return cursor.rowcount > 0

    async def close(self) -> None:
        """Close SQLite connection."""
        if self.connection:
            await self.connection.close()
            self.connection = None
