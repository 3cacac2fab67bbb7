"""Fixed callout colour table shared by both conversion directions."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from .models import CalloutStyle

DEFAULT_CALLOUT_COLOR = "gray"

CALLOUT_STYLES: Mapping[str, CalloutStyle] = MappingProxyType(
    {
        "gray": CalloutStyle(background="#e8e8e880", border="#73737633"),
        "blue": CalloutStyle(background="#e3e7fa80", border="#334bfa33"),
        "green": CalloutStyle(background="#d7efdc80", border="#1bb15733"),
        "red": CalloutStyle(background="#fed9db80", border="#fd3a5733"),
        "yellow": CalloutStyle(background="#feedaf80", border="#fbc91633"),
    }
)

CALLOUT_COLORS: tuple[str, ...] = tuple(CALLOUT_STYLES)

# Older articles carry the opaque gray without an alpha channel.
_LEGACY_BACKGROUNDS = {"#e8e8e8": "gray"}

_BACKGROUND_TO_COLOR: Mapping[str, str] = MappingProxyType(
    {
        **{style.background: name for name, style in CALLOUT_STYLES.items()},
        **_LEGACY_BACKGROUNDS,
    }
)


def style_for_color(name: Optional[str]) -> CalloutStyle:
    """Return the style pair for ``name``, falling back to gray."""

    key = (name or "").strip().lower()
    return CALLOUT_STYLES.get(key, CALLOUT_STYLES[DEFAULT_CALLOUT_COLOR])


def color_for_background(value: Optional[str]) -> str:
    """Map a CSS background colour back to its callout colour name."""

    if not value:
        return DEFAULT_CALLOUT_COLOR
    key = value.strip().lower()
    return _BACKGROUND_TO_COLOR.get(key, DEFAULT_CALLOUT_COLOR)


__all__ = [
    "CALLOUT_COLORS",
    "CALLOUT_STYLES",
    "DEFAULT_CALLOUT_COLOR",
    "color_for_background",
    "style_for_color",
]
