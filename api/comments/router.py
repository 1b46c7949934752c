"""
Comment API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status

from core import http, rate_limit
from core.db import Database, get_database

from . import schemas, service

router = APIRouter()


@router.get("/api/health")
async def health(db: Database = Depends(get_database)) -> schemas.HealthResponse:
    return schemas.HealthResponse(db=db.ready, message="Apleno API funcionando")


@router.get("/api/comments")
async def list_comments(
    limit: str | None = Query(default=None),
    offset: str | None = Query(default=None),
    db: Database = Depends(get_database),
) -> schemas.CommentPage:
    """
    List comments, newest first. Bad or missing paging values fall back to defaults.
    """
    return await service.list_comments(db, limit=limit, offset=offset)


@router.post(
    "/api/comments",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit.enforce_create_rate_limit)],
)
async def create_comment(
    request: Request,
    db: Database = Depends(get_database),
) -> schemas.CommentCreatedResponse:
    payload = await http.read_json_body(request, max_bytes=request.app.state.settings.max_body_bytes)
    item = await service.create_comment(
        db,
        name=payload.get("name"),
        email=payload.get("email"),
        message=payload.get("message"),
    )
    return schemas.CommentCreatedResponse(item=item)
