from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Sequence

import aiosqlite

from gridkeeper.domain.errors import StoreUnavailable

logger = logging.getLogger(__name__)


class Database:
    """
    Small async SQLite wrapper.

    - One connection per process
    - WAL enabled so reads don't block gameplay writes
    - Read failures surface as StoreUnavailable
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._conn: aiosqlite.Connection | None = None

    @property
    def conn(self) -> aiosqlite.Connection:
        if not self._conn:
            raise StoreUnavailable("Database connection is not initialized. Call connect() first.")
        return self._conn

    async def connect(self) -> None:
        if self._conn is not None:
            return

        logger.info("Connecting to SQLite: %s", self._db_path)
        self._conn = await aiosqlite.connect(self._db_path.as_posix())

        # row["column"] access
        self._conn.row_factory = aiosqlite.Row

        await self._conn.execute("PRAGMA foreign_keys = ON;")
        await self._conn.execute("PRAGMA journal_mode = WAL;")
        await self._conn.execute("PRAGMA synchronous = NORMAL;")
        await self._conn.execute("PRAGMA busy_timeout = 5000;")  # ms
        await self._conn.commit()

    async def close(self) -> None:
        if self._conn is None:
            return
        logger.info("Closing SQLite connection")
        await self._conn.close()
        self._conn = None

    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> None:
        """
        Execute a statement and commit immediately.
        Use transaction() for batching multiple statements.
        """
        if params is None:
            params = ()
        await self.conn.execute(sql, params)
        await self.conn.commit()

    async def fetchone(self, sql: str, params: Sequence[Any] | None = None) -> aiosqlite.Row | None:
        if params is None:
            params = ()
        try:
            async with self.conn.execute(sql, params) as cursor:
                return await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StoreUnavailable(f"SQLite read failed: {e}") from e

    async def fetchall(self, sql: str, params: Sequence[Any] | None = None) -> list[aiosqlite.Row]:
        if params is None:
            params = ()
        try:
            async with self.conn.execute(sql, params) as cursor:
                rows = await cursor.fetchall()
                return list(rows)
        except aiosqlite.Error as e:
            raise StoreUnavailable(f"SQLite read failed: {e}") from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Transaction context manager (commit on success, rollback on error).
        """
        try:
            await self.conn.execute("BEGIN;")
            yield self.conn
        except Exception:
            await self.conn.rollback()
            raise
        else:
            await self.conn.commit()
