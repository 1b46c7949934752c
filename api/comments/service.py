"""
Comment business logic.

Scope:
- validate and store new comments
- page through stored comments, newest first
- shape rows into client-facing views (escaped message, no email)
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

from core.db import Database

from . import repository, schemas, validation

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_OFFSET = 0
# Offsets past this do not fit a sqlite INTEGER; the page is empty either way.
MAX_OFFSET = 2**63 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    # Same shape as JavaScript's Date.toISOString(): millisecond precision, `Z` suffix.
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _parse_int(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not _INT_RE.fullmatch(text):
        return None
    return int(text)


def resolve_paging(limit: Any = None, offset: Any = None) -> tuple[int, int]:
    """
    Apply defaults to absent or non-integer values, then clamp.

    limit: default 20, clamped to [1, 100]
    offset: default 0, clamped to [0, 2**63 - 1] (sqlite's INTEGER range)
    """
    parsed_limit = _parse_int(limit)
    parsed_offset = _parse_int(offset)
    if parsed_limit is None:
        parsed_limit = DEFAULT_LIMIT
    if parsed_offset is None:
        parsed_offset = DEFAULT_OFFSET
    return max(1, min(parsed_limit, MAX_LIMIT)), max(0, min(parsed_offset, MAX_OFFSET))


def _to_list_item(row: dict[str, Any]) -> schemas.CommentListItem:
    created_at = row.get("created_at")
    return schemas.CommentListItem(
        id=int(row["id"]),
        name=validation.display_name(row.get("name")),
        message=validation.sanitize_for_display(row.get("message")),
        date=str(row["date"]),
        created_at=str(created_at) if created_at is not None else None,
    )


async def create_comment(db: Database, *, name: Any, email: Any, message: Any) -> schemas.CommentItem:
    fields = validation.validate_create(name, email, message)
    date = _utc_now_iso()

    comment_id = await repository.insert_comment(
        db,
        name=fields.name,
        email=fields.email,
        message=fields.message,
        date=date,
    )
    logger.info("comment_created id=%s", comment_id)

    return schemas.CommentItem(
        id=comment_id,
        name=validation.display_name(fields.name),
        message=validation.sanitize_for_display(fields.message),
        date=date,
    )


async def list_comments(db: Database, *, limit: Any = None, offset: Any = None) -> schemas.CommentPage:
    resolved_limit, resolved_offset = resolve_paging(limit, offset)
    rows = await repository.list_comments(db, limit=resolved_limit, offset=resolved_offset)
    return schemas.CommentPage(
        items=[_to_list_item(row) for row in rows],
        limit=resolved_limit,
        offset=resolved_offset,
    )
