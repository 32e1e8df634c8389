"""Accent colors for diary entries.

Every entry is drawn in an accent color: the one the user picked, or a
default derived from its mood. Colors are stored as hex strings in the
3-digit (``#RGB``), 6-digit (``#RRGGBB``) or 8-digit (``#AARRGGBB``) form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from loguru import logger

from .models import Entry, Mood

_HEX_DIGITS_RE = re.compile(r"[0-9A-Fa-f]+")

FALLBACK_COLOR = "#8E8E93"  # gray

MOOD_COLORS: dict[str, str] = {
    Mood.HAPPY: "#FFCC00",  # yellow
    Mood.SAD: "#007AFF",  # blue
    Mood.ANGRY: "#FF3B30",  # red
    Mood.LOVE: "#FF2D55",  # pink
    Mood.CALM: "#00C7BE",  # mint
    Mood.SURPRISED: "#FF9500",  # orange
    Mood.BORED: "#8E8E93",  # gray
    Mood.EXCITED: "#AF52DE",  # purple
    Mood.THOUGHTFUL: "#5856D6",  # indigo
    Mood.GRATEFUL: "#34C759",  # green
}

# Named swatches offered next to the free color picker.
PRESET_COLORS: list[tuple[str, str]] = [
    ("Ferrari Red", "#FF2800"),
    ("McLaren Papaya", "#FF8700"),
    ("Mercedes Silver", "#00D2BE"),
    ("Red Bull Blue", "#0600EF"),
    ("Unit-01 Purple", "#5F3D7A"),
    ("Unit-00 Yellow", "#FFD700"),
    ("Unit-02 Red", "#C41E3A"),
    ("NERV Orange", "#FF6600"),
    ("Miku Green", "#39C5BB"),
    ("Klein Blue", "#002FA7"),
    ("Tiffany Blue", "#81D8D0"),
    ("Periwinkle", "#6667AB"),
    ("Marrs Green", "#008C8C"),
    ("Burgundy", "#900020"),
    ("Bordeaux", "#5D1F1C"),
    ("Hermes Orange", "#E8590C"),
    ("Red", "#FF0000"),
    ("Green", "#00FF00"),
    ("Blue", "#0000FF"),
]


@dataclass(frozen=True)
class RGBA:
    """An sRGB color with 8-bit channels and a 0..1 alpha."""

    red: int
    green: int
    blue: int
    alpha: float = 1.0

    def with_opacity(self, opacity: float) -> RGBA:
        """Scale alpha by *opacity*, the way a view modifier would."""
        return RGBA(self.red, self.green, self.blue, round(self.alpha * opacity, 4))


def parse_hex(value: str) -> RGBA:
    """Parse ``#RGB``, ``#RRGGBB`` or ``#AARRGGBB`` (leading ``#`` optional).

    Raises:
        ValueError: If *value* is not one of those forms.
    """
    digits = value.strip().lstrip("#")
    if not _HEX_DIGITS_RE.fullmatch(digits):
        raise ValueError(f"Not a hex color: {value!r}")
    n = int(digits, 16)

    match len(digits):
        case 3:
            return RGBA((n >> 8) * 17, (n >> 4 & 0xF) * 17, (n & 0xF) * 17)
        case 6:
            return RGBA(n >> 16, n >> 8 & 0xFF, n & 0xFF)
        case 8:
            return RGBA(n >> 16 & 0xFF, n >> 8 & 0xFF, n & 0xFF, round((n >> 24) / 255, 4))
    raise ValueError(f"Hex color must have 3, 6 or 8 digits: {value!r}")


def to_hex(color: RGBA) -> str:
    """Format as ``#RRGGBB``; alpha is dropped."""
    return f"#{color.red:02X}{color.green:02X}{color.blue:02X}"


def default_color(mood: str) -> str:
    """Hex color used for *mood* when the entry has no accent of its own."""
    return MOOD_COLORS.get(mood, FALLBACK_COLOR)


def resolve_accent(entry: Entry) -> RGBA:
    """The color an entry should be drawn in, opacity applied."""
    hex_value = entry.accent_color or default_color(entry.mood)
    try:
        color = parse_hex(hex_value)
    except ValueError:
        logger.debug(f"Entry {entry.id} has unusable accent {hex_value!r}, using mood default")
        color = parse_hex(default_color(entry.mood))
    return color.with_opacity(entry.accent_opacity)
