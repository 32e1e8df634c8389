"""Diary data models and their on-disk JSON form.

An ``Entry`` is one diary page: a mood marker, a title, free text, zero or
more photos, an optional accent color, and an append-only comment thread.
Entries are replaced whole, never patched field by field, so the helpers
here return new objects instead of mutating.

Encoding is deterministic (fixed key order, fixed indentation) so writing
the same entry twice produces byte-identical records.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import json
import re
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from memogalaxy.core.exceptions import EntryDecodeError

DEFAULT_ACCENT_OPACITY = 0.8

_ID_RE = re.compile(r"\A[A-Za-z0-9][A-Za-z0-9._-]*\Z")


class Mood(StrEnum):
    HAPPY = "😊"
    SAD = "😢"
    ANGRY = "😠"
    LOVE = "🥰"
    CALM = "😌"
    SURPRISED = "😲"
    BORED = "😴"
    EXCITED = "🎉"
    THOUGHTFUL = "🤔"
    GRATEFUL = "🙏"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; leave aware ones alone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Comment:
    id: str
    text: str
    created_at: datetime

    def __post_init__(self):
        self.created_at = _as_utc(self.created_at)

    @classmethod
    def create(cls, text: str) -> Comment:
        return cls(id=_new_id(), text=text, created_at=_utcnow())


@dataclass
class Entry:
    """A single diary entry.

    Attributes:
        id: Opaque unique identifier; also names the record on disk.
        title: Short headline.
        content: Free text.
        mood: Mood marker, usually a ``Mood`` value but any text is kept as-is.
        created_at: Creation time; the diary's only sort key.
        images: Photo blobs in display order.
        accent_color: Hex color chosen by the user, or None for the mood default.
        accent_opacity: Opacity of the accent, 0..1.
        comments: Follow-up notes, oldest first.
    """

    id: str
    title: str
    content: str
    mood: str
    created_at: datetime
    images: list[bytes] = field(default_factory=list)
    accent_color: str | None = None
    accent_opacity: float = DEFAULT_ACCENT_OPACITY
    comments: list[Comment] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.id, str) or not _ID_RE.match(self.id):
            raise ValueError(f"Entry id must be a non-empty filename-safe string, got {self.id!r}")
        self.created_at = _as_utc(self.created_at)
        self.accent_opacity = float(self.accent_opacity)
        if not 0.0 <= self.accent_opacity <= 1.0:
            raise ValueError(f"accent_opacity must be within [0, 1], got {self.accent_opacity}")

    @classmethod
    def create(
        cls,
        title: str,
        content: str,
        mood: str = Mood.HAPPY,
        *,
        images: list[bytes] | None = None,
        accent_color: str | None = None,
        accent_opacity: float = DEFAULT_ACCENT_OPACITY,
    ) -> Entry:
        """Build a brand-new entry with a fresh id and the current time."""
        return cls(
            id=_new_id(),
            title=title,
            content=content,
            mood=str(mood),
            created_at=_utcnow(),
            images=list(images or []),
            accent_color=accent_color,
            accent_opacity=accent_opacity,
        )

    def with_comment(self, text: str) -> Entry:
        """Return a copy of this entry with *text* appended as a new comment."""
        return dataclasses.replace(self, comments=[*self.comments, Comment.create(text)])

    def __repr__(self) -> str:
        preview = self.title[:30] + "..." if len(self.title) > 30 else self.title
        return f"Entry(id='{self.id}', mood='{self.mood}', title='{preview}', created_at='{self.created_at.isoformat()}')"


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def entry_to_dict(entry: Entry) -> dict[str, Any]:
    """Serialize an Entry to a JSON-safe dict."""
    return {
        "id": entry.id,
        "title": entry.title,
        "content": entry.content,
        "mood": entry.mood,
        "created_at": entry.created_at.isoformat(),
        "images": [base64.b64encode(blob).decode("ascii") for blob in entry.images],
        "accent_color": entry.accent_color,
        "accent_opacity": entry.accent_opacity,
        "comments": [
            {"id": c.id, "text": c.text, "created_at": c.created_at.isoformat()} for c in entry.comments
        ],
    }


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


def entry_from_dict(data: dict[str, Any]) -> Entry:
    """Deserialize an Entry from a dict produced by ``entry_to_dict``.

    Missing optional fields take their defaults; ``images`` may be null.

    Raises:
        KeyError, TypeError, ValueError: On missing or malformed fields.
    """
    if not isinstance(data, dict):
        raise TypeError(f"Entry record must be an object, got {type(data).__name__}")

    accent_color = data.get("accent_color")
    if accent_color is not None and not isinstance(accent_color, str):
        raise TypeError("'accent_color' must be a string or null")

    opacity = data.get("accent_opacity", DEFAULT_ACCENT_OPACITY)
    if isinstance(opacity, bool) or not isinstance(opacity, int | float):
        raise TypeError("'accent_opacity' must be a number")

    comments = [
        Comment(
            id=_require_str(c, "id"),
            text=_require_str(c, "text"),
            created_at=datetime.fromisoformat(_require_str(c, "created_at")),
        )
        for c in data.get("comments") or []
    ]

    return Entry(
        id=_require_str(data, "id"),
        title=_require_str(data, "title"),
        content=_require_str(data, "content"),
        mood=_require_str(data, "mood"),
        created_at=datetime.fromisoformat(_require_str(data, "created_at")),
        images=[base64.b64decode(blob, validate=True) for blob in data.get("images") or []],
        accent_color=accent_color,
        accent_opacity=opacity,
        comments=comments,
    )


def encode_entry(entry: Entry) -> bytes:
    """Encode an Entry as the UTF-8 JSON bytes stored on disk."""
    text = json.dumps(entry_to_dict(entry), indent=2, ensure_ascii=False)
    return (text + "\n").encode("utf-8")


def decode_entry(data: bytes) -> Entry:
    """Decode on-disk bytes back into an Entry.

    Raises:
        EntryDecodeError: If the bytes are not a valid entry record.
    """
    try:
        return entry_from_dict(json.loads(data.decode("utf-8")))
    except (UnicodeDecodeError, json.JSONDecodeError, binascii.Error) as e:
        raise EntryDecodeError(f"Unreadable entry record: {e}") from e
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise EntryDecodeError(f"Invalid entry record: {e!r}") from e
