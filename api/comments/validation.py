"""
Field rules for incoming comments and escaping for outgoing ones.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 150
MESSAGE_MIN_LENGTH = 5
MESSAGE_MAX_LENGTH = 2000
ANONYMOUS_NAME = "Anónimo"

_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")

# `&` goes first so the entities added by later rules are not escaped again.
_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


class ValidationError(ValueError):
    def __init__(self, code: str, field: str) -> None:
        super().__init__(f"{field}: {code}")
        self.code = code
        self.field = field


@dataclass(frozen=True)
class NewComment:
    name: str
    email: str
    message: str


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def validate_create(name: Any, email: Any, message: Any) -> NewComment:
    """
    Normalize the create fields or raise `ValidationError` for the first broken rule.

    `name` and `email` are truncated rather than rejected when too long.
    """
    name = _as_text(name).strip()[:NAME_MAX_LENGTH]
    email = _as_text(email).strip()[:EMAIL_MAX_LENGTH]
    message = _as_text(message).strip()

    if len(message) < MESSAGE_MIN_LENGTH:
        raise ValidationError("VALIDATION_MIN_LENGTH", "message")
    if len(message) > MESSAGE_MAX_LENGTH:
        raise ValidationError("VALIDATION_MAX_LENGTH", "message")
    if email and not _EMAIL_RE.match(email):
        raise ValidationError("VALIDATION_EMAIL", "email")

    return NewComment(name=name, email=email, message=message)


def sanitize_for_display(text: str | None) -> str:
    out = _as_text(text)
    for char, entity in _HTML_ESCAPES:
        out = out.replace(char, entity)
    return out


def display_name(name: str | None) -> str:
    return name or ANONYMOUS_NAME
