"""SQLite-backed key-value store.

Persists the cache namespace to a local SQLite file (``data/museflow.db``
by default) using ``aiosqlite`` for async I/O.  Values are stored as JSON
text.  Every public method maps ``aiosqlite``/``sqlite3`` and JSON errors
onto :class:`StorageError` so the cache can treat them uniformly.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from museflow.interfaces.kv_store import IKeyValueStore
from museflow.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/museflow.db")

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS kv_store (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

# DELETE + INSERT (rather than an upsert) gives an overwritten key a new
# rowid, so ORDER BY rowid reflects write order like the memory store.
_DELETE_SQL = "DELETE FROM kv_store WHERE key = ?;"
_INSERT_SQL = "INSERT INTO kv_store (key, value) VALUES (?, ?);"
_SELECT_ALL_SQL = "SELECT key, value FROM kv_store ORDER BY rowid;"


class SQLiteKeyValueStore(IKeyValueStore):
    """SQLite-backed key-value persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)
        self._initialized = False

    async def initialize(self) -> None:
        """Create the kv_store table if it doesn't exist."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_TABLE_SQL)
                await db.commit()
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(
                message=f"Could not initialise {self._db_path}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        self._initialized = True
        logger.info("kv_db_initialized", path=str(self._db_path))

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.initialize()

    # ------------------------------------------------------------------
    # IKeyValueStore implementation
    # ------------------------------------------------------------------

    async def get(self, keys: Iterable[str]) -> dict[str, Any]:
        wanted = list(keys)
        if not wanted:
            return {}
        await self._ensure_initialized()
        placeholders = ", ".join("?" for _ in wanted)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(
                    f"SELECT key, value FROM kv_store WHERE key IN ({placeholders}) "  # noqa: S608
                    "ORDER BY rowid",
                    wanted,
                )
                rows = await cursor.fetchall()
            return {key: json.loads(value) for key, value in rows}
        except (sqlite3.Error, json.JSONDecodeError) as exc:
            raise StorageError(
                message=f"KV read failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def set(self, items: Mapping[str, Any]) -> None:
        if not items:
            return
        await self._ensure_initialized()
        try:
            rows = [(key, json.dumps(value, ensure_ascii=False)) for key, value in items.items()]
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.executemany(_DELETE_SQL, [(key,) for key, _ in rows])
                await db.executemany(_INSERT_SQL, rows)
                await db.commit()
        except (sqlite3.Error, TypeError, ValueError) as exc:
            raise StorageError(
                message=f"KV write failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def remove(self, keys: Iterable[str]) -> None:
        doomed = [(key,) for key in keys]
        if not doomed:
            return
        await self._ensure_initialized()
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.executemany(_DELETE_SQL, doomed)
                await db.commit()
        except sqlite3.Error as exc:
            raise StorageError(
                message=f"KV delete failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def get_all(self) -> dict[str, Any]:
        await self._ensure_initialized()
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(_SELECT_ALL_SQL)
                rows = await cursor.fetchall()
            return {key: json.loads(value) for key, value in rows}
        except (sqlite3.Error, json.JSONDecodeError) as exc:
            raise StorageError(
                message=f"KV enumeration failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def get_provider_name(self) -> str:
        return "sqlite"
