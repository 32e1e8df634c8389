"""Mood diary: entries, their accent colors, and the file-backed store."""

from .backup import create_backup, restore_backup, restore_into_store
from .colors import PRESET_COLORS, RGBA, default_color, parse_hex, resolve_accent, to_hex
from .images import DEFAULT_IMAGE_QUALITY, compress_image
from .models import (
    DEFAULT_ACCENT_OPACITY,
    Comment,
    Entry,
    Mood,
    decode_entry,
    encode_entry,
    entry_from_dict,
    entry_to_dict,
)
from .store import EntryStore, record_key

__all__ = [
    "DEFAULT_ACCENT_OPACITY",
    "DEFAULT_IMAGE_QUALITY",
    "PRESET_COLORS",
    "RGBA",
    "Comment",
    "Entry",
    "EntryStore",
    "Mood",
    "compress_image",
    "create_backup",
    "decode_entry",
    "default_color",
    "encode_entry",
    "entry_from_dict",
    "entry_to_dict",
    "parse_hex",
    "record_key",
    "resolve_accent",
    "restore_backup",
    "restore_into_store",
    "to_hex",
]
