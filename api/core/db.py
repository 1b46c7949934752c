"""
Async database access helpers (raw SQL) using aiosqlite.

`Database` owns the single connection to the SQLite file. `main.py` opens it on
startup and closes it on shutdown; request handlers receive it through
`get_database` instead of reaching for a module global.

SQL parameter style:
- sqlite uses positional placeholders: ?, ?, ?
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Sequence

import aiosqlite
from fastapi import Request

logger = logging.getLogger(__name__)


# Storage failures are explicit and separable from other runtime errors.
class StorageError(RuntimeError):
    pass


class Database:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._conn: aiosqlite.Connection | None = None
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    def mark_ready(self) -> None:
        if self._conn is None:
            raise StorageError("Database is not open.")
        self._ready = True

    async def open(self) -> None:
        if self._conn is not None:
            return None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(self.path)
        except (OSError, sqlite3.Error) as e:
            raise StorageError(f"Failed to open database at {self.path}.") from e
        conn.row_factory = aiosqlite.Row
        self._conn = conn
        logger.info("db_opened path=%s", self.path)

    async def close(self) -> None:
        self._ready = False
        conn, self._conn = self._conn, None
        if conn is None:
            return None
        try:
            await conn.commit()
        finally:
            await conn.close()
        logger.info("db_closed path=%s", self.path)

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageError("Database is not open. Call open() on startup.")
        return self._conn

    async def execute_script(self, sql: str) -> None:
        """
        Run one or more DDL statements and commit.
        """
        conn = self._connection()
        try:
            await conn.executescript(sql)
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError("Failed to execute script.") from e

    async def insert(self, sql: str, params: Sequence[Any] = ()) -> int:
        """
        Run an INSERT, commit, and return the new row id.
        """
        conn = self._connection()
        try:
            async with conn.execute(sql, params) as cursor:
                row_id = cursor.lastrowid
            await conn.commit()
        except sqlite3.Error as e:
            raise StorageError("Failed to insert row.") from e
        if row_id is None:
            raise StorageError("Insert did not produce a row id.")
        return int(row_id)

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        conn = self._connection()
        try:
            async with conn.execute(sql, params) as cursor:
                rows = await cursor.fetchall()
        except sqlite3.Error as e:
            raise StorageError("Failed to fetch rows.") from e
        return [dict(r) for r in rows]


def get_database(request: Request) -> Database:
    return request.app.state.db
