"""Tests for memogalaxy.diary.colors."""

import pytest

from memogalaxy.diary.colors import (
    FALLBACK_COLOR,
    MOOD_COLORS,
    PRESET_COLORS,
    RGBA,
    default_color,
    parse_hex,
    resolve_accent,
    to_hex,
)
from memogalaxy.diary.models import Mood


class TestParseHex:
    def test_six_digits(self):
        assert parse_hex("#39C5BB") == RGBA(0x39, 0xC5, 0xBB)

    def test_without_hash_and_lowercase(self):
        assert parse_hex("ff8700") == RGBA(255, 135, 0)

    def test_three_digits_expand(self):
        assert parse_hex("#F80") == RGBA(255, 136, 0)

    def test_eight_digits_are_argb(self):
        color = parse_hex("#80FF0000")
        assert (color.red, color.green, color.blue) == (255, 0, 0)
        assert color.alpha == pytest.approx(128 / 255, abs=1e-4)

    @pytest.mark.parametrize("value", ["", "#", "#12", "#12345", "#GGGGGG", "0x123", "#+12"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_hex(value)


def test_to_hex_roundtrip():
    for _, hex_value in PRESET_COLORS:
        assert to_hex(parse_hex(hex_value)) == hex_value


def test_every_mood_has_a_color():
    assert set(MOOD_COLORS) == set(Mood)
    assert default_color(Mood.SAD) == "#007AFF"
    assert default_color("😊") == MOOD_COLORS[Mood.HAPPY]
    assert default_color("🦄") == FALLBACK_COLOR


class TestResolveAccent:
    def test_custom_color_wins(self, make_entry):
        color = resolve_accent(make_entry("1", accent_color="#0000FF", accent_opacity=0.5))
        assert (color.red, color.green, color.blue) == (0, 0, 255)
        assert color.alpha == 0.5

    def test_mood_default(self, make_entry):
        color = resolve_accent(make_entry("1", mood="😠"))
        assert to_hex(color) == MOOD_COLORS[Mood.ANGRY]
        assert color.alpha == 0.8

    def test_unknown_mood_falls_back_to_gray(self, make_entry):
        assert to_hex(resolve_accent(make_entry("1", mood="🦄"))) == FALLBACK_COLOR

    def test_bad_custom_color_uses_mood_default(self, make_entry):
        color = resolve_accent(make_entry("1", mood="🙏", accent_color="not-a-color"))
        assert to_hex(color) == MOOD_COLORS[Mood.GRATEFUL]

    def test_opacity_multiplies_color_alpha(self, make_entry):
        color = resolve_accent(make_entry("1", accent_color="#80FF0000", accent_opacity=0.5))
        assert color.alpha == pytest.approx(0.251, abs=1e-3)
