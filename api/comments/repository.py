"""
Comment persistence.
This module is where comment-related SQL lives.
"""

from __future__ import annotations

from typing import Any

from core.db import Database

SCHEMA = """
CREATE TABLE IF NOT EXISTS comments (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  name TEXT,
  email TEXT,
  message TEXT NOT NULL,
  date TEXT NOT NULL,
  created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_comments_created_at ON comments(created_at DESC);
"""


async def ensure_schema(db: Database) -> None:
    await db.execute_script(SCHEMA)


async def insert_comment(
    db: Database,
    *,
    name: str | None,
    email: str | None,
    message: str,
    date: str,
) -> int:
    # Empty optional fields are stored as NULL.
    return await db.insert(
        """
        INSERT INTO comments (name, email, message, date)
        VALUES (?, ?, ?, ?)
        """,
        (name or None, email or None, message, date),
    )


async def list_comments(db: Database, *, limit: int = 20, offset: int = 0) -> list[dict[str, Any]]:
    """
    Newest first. `email` is never selected.
    """
    return await db.fetch_all(
        """
        SELECT id, name, message, date, created_at
        FROM comments
        ORDER BY created_at DESC, id DESC
        LIMIT ?
        OFFSET ?
        """,
        (limit, offset),
    )
