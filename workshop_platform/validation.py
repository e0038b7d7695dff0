"""Input normalisation and validation shared by services and clients."""

from __future__ import annotations

import re

from .config import (
    MAX_DESCRIPTION_LENGTH,
    MAX_IDENTITY_LENGTH,
    MAX_NAME_LENGTH,
    MAX_NOTE_LENGTH,
    MAX_STATEMENT_LENGTH,
    MAX_TITLE_LENGTH,
    TOOL_KINDS,
)
from .errors import ValidationFailed

_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_text(value: str) -> str:
    """Trim and collapse internal whitespace runs to a single space."""
    return _WHITESPACE_RE.sub(" ", value.strip())


def _required(value: str | None, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailed(f"{field} is required", field=field)
    return value


def _max_length(value: str, field: str, limit: int) -> str:
    if len(value) > limit:
        raise ValidationFailed(
            f"{field} must be {limit} characters or less",
            field=field,
        )
    return value


def validate_title(title: str | None) -> str:
    cleaned = sanitize_text(_required(title, "title"))
    _max_length(cleaned, "title", MAX_TITLE_LENGTH)
    if "<" in cleaned or ">" in cleaned:
        raise ValidationFailed("title cannot contain < or > characters", field="title")
    return cleaned


def validate_description(description: str | None) -> str | None:
    if description is None:
        return None
    cleaned = sanitize_text(description)
    if not cleaned:
        return None
    return _max_length(cleaned, "description", MAX_DESCRIPTION_LENGTH)


def validate_identity(identity: str | None, field: str = "identity") -> str:
    """Identities are opaque: trimmed, never otherwise rewritten."""
    cleaned = _required(identity, field).strip()
    return _max_length(cleaned, field, MAX_IDENTITY_LENGTH)


def validate_name(name: str | None, field: str = "name") -> str:
    cleaned = sanitize_text(_required(name, field))
    return _max_length(cleaned, field, MAX_NAME_LENGTH)


def validate_statement_text(text: str | None, field: str = "text") -> str:
    """Statements keep their line breaks; only outer whitespace is trimmed."""
    cleaned = _required(text, field).strip()
    return _max_length(cleaned, field, MAX_STATEMENT_LENGTH)


def validate_note(note: str | None, field: str = "note") -> str | None:
    """Optional free-text comment on a vote; blank notes become None."""
    if note is None:
        return None
    cleaned = sanitize_text(note)
    if not cleaned:
        return None
    return _max_length(cleaned, field, MAX_NOTE_LENGTH)


def validate_tool_kind(tool_kind: str | None) -> str:
    if tool_kind not in TOOL_KINDS:
        raise ValidationFailed(
            f"Unknown tool kind {tool_kind!r}. Expected one of: {', '.join(TOOL_KINDS)}",
            field="tool_kind",
        )
    return tool_kind


__all__ = [
    "sanitize_text",
    "validate_title",
    "validate_description",
    "validate_identity",
    "validate_name",
    "validate_statement_text",
    "validate_note",
    "validate_tool_kind",
]
