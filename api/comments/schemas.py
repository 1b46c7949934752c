"""
Comment API schemas (response models).

`email` is deliberately absent from every model here.
"""

from __future__ import annotations

from pydantic import BaseModel


class CommentItem(BaseModel):
    id: int
    name: str
    message: str
    date: str


class CommentListItem(CommentItem):
    created_at: str | None = None


class CommentCreatedResponse(BaseModel):
    ok: bool = True
    item: CommentItem


class CommentPage(BaseModel):
    ok: bool = True
    items: list[CommentListItem]
    limit: int
    offset: int


class HealthResponse(BaseModel):
    ok: bool = True
    db: bool
    message: str
