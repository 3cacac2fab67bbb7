"""
Unit tests for the callout style registry.
"""
from article_codec.models import CalloutStyle
from article_codec.styles import (
    CALLOUT_COLORS,
    CALLOUT_STYLES,
    DEFAULT_CALLOUT_COLOR,
    color_for_background,
    style_for_color,
)


class TestStyleRegistry:
    """Test the fixed colour table."""

    def test_five_colours(self):
        """The registry holds exactly the five callout colours."""
        assert CALLOUT_COLORS == ("gray", "blue", "green", "red", "yellow")

    def test_style_pairs(self):
        """Background and border values match the editor palette."""
        assert CALLOUT_STYLES["blue"] == CalloutStyle(
            background="#e3e7fa80", border="#334bfa33"
        )
        assert CALLOUT_STYLES["yellow"].border == "#fbc91633"

    def test_css(self):
        """Styles render as an inline style attribute value."""
        assert CALLOUT_STYLES["gray"].css() == (
            "background-color: #e8e8e880; border-color: #73737633;"
        )

    def test_unknown_colour_falls_back_to_gray(self):
        """Unknown colour names use the gray style."""
        assert style_for_color("purple") == CALLOUT_STYLES["gray"]
        assert style_for_color(None) == CALLOUT_STYLES["gray"]
        assert style_for_color(" RED ") == CALLOUT_STYLES["red"]


class TestColorForBackground:
    """Test reverse lookup from CSS background colours."""

    def test_every_colour_round_trips(self):
        """Each registered background maps back to its colour name."""
        for name, style in CALLOUT_STYLES.items():
            assert color_for_background(style.background) == name

    def test_case_and_whitespace_insensitive(self):
        """Lookups ignore case and surrounding whitespace."""
        assert color_for_background("  #FED9DB80 ") == "red"

    def test_legacy_gray(self):
        """The opaque legacy gray is still recognised."""
        assert color_for_background("#e8e8e8") == "gray"

    def test_unknown_background(self):
        """Unknown or missing backgrounds map to the default colour."""
        assert color_for_background("#123456") == DEFAULT_CALLOUT_COLOR
        assert color_for_background(None) == DEFAULT_CALLOUT_COLOR
