"""
Request body helpers shared by routers.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request


class MalformedRequestError(ValueError):
    pass


class PayloadTooLargeError(ValueError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Request body exceeds {limit} bytes.")
        self.limit = limit


def _declared_length(request: Request) -> int | None:
    raw = (request.headers.get("content-length") or "").strip()
    if not raw.isdigit():
        return None
    return int(raw)


async def read_json_body(request: Request, *, max_bytes: int) -> dict[str, Any]:
    """
    Read and decode a JSON object body.

    The size ceiling is checked against `Content-Length` first and against the
    received bytes second, both before any decoding. An empty body is `{}`.
    """
    declared = _declared_length(request)
    if declared is not None and declared > max_bytes:
        raise PayloadTooLargeError(max_bytes)

    body = await request.body()
    if len(body) > max_bytes:
        raise PayloadTooLargeError(max_bytes)
    if not body.strip():
        return {}

    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
        raise MalformedRequestError("Request body is not valid JSON.") from e

    if not isinstance(payload, dict):
        raise MalformedRequestError("Request body must be a JSON object.")

    # `\ud800`-style escapes decode to lone surrogates that cannot be stored as UTF-8.
    try:
        json.dumps(payload, ensure_ascii=False).encode("utf-8")
    except UnicodeEncodeError as e:
        raise MalformedRequestError("Request body contains invalid unicode.") from e
    return payload
