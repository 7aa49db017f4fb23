"""Text styles for terminal output, written as short space-separated words."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class NamedColor(Enum):
    """One of the eight basic terminal colours."""

    BLACK = "black"
    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"
    PURPLE = "purple"
    CYAN = "cyan"
    WHITE = "white"


@dataclass(frozen=True)
class FixedColor:
    """A colour from the 256-colour palette."""

    index: int


@dataclass(frozen=True)
class RgbColor:
    """A 24-bit colour."""

    r: int
    g: int
    b: int


Color = NamedColor | FixedColor | RgbColor


@dataclass(frozen=True)
class Style:
    """Attributes and colours applied to a piece of text."""

    bold: bool = False
    italic: bool = False
    dimmed: bool = False
    hidden: bool = False
    blink: bool = False
    reverse: bool = False
    strikethrough: bool = False
    underline: bool = False
    foreground: Color | None = None
    background: Color | None = None


_U8 = re.compile(r"\+?[0-9]+")
_HEX = re.compile(r"\+?[0-9A-Fa-f]+")


def _parse_u8(text: str) -> int | None:
    if _U8.fullmatch(text):
        value = int(text)
        if value <= 0xFF:
            return value
    return None


def parse_color(text: str) -> Color | None:
    """Parse a colour name, palette index, ``rgb(r,g,b)`` or ``#rrggbb``; None if invalid."""
    try:
        return NamedColor(text)
    except ValueError:
        pass
    index = _parse_u8(text)
    if index is not None:
        return FixedColor(index)
    if text.startswith("rgb(") and text.endswith(")"):
        channels = [v for part in text[4:-1].split(",") if (v := _parse_u8(part)) is not None]
        if len(channels) >= 3:
            return RgbColor(*channels[:3])
        return None
    if text.startswith("#"):
        digits = text.lstrip("#")
        if _HEX.fullmatch(digits):
            value = int(digits, 16)
            if value <= 0xFFFFFFFF:
                return RgbColor((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)
    return None


def format_color(color: Color) -> str:
    """Render a colour in the form parse_color() accepts."""
    match color:
        case NamedColor():
            return color.value
        case FixedColor(index):
            return str(index)
        case RgbColor(r, g, b):
            return f"rgb({r},{g},{b})"
    raise TypeError(f"not a colour: {color!r}")


_FLAG_WORDS = {
    "bold": "bold",
    "italic": "italic",
    "dimmed": "dimmed",
    "dim": "dimmed",
    "underline": "underline",
    "under": "underline",
    "blink": "blink",
    "strikethrough": "strikethrough",
    "strike": "strikethrough",
    "hidden": "hidden",
    "none": "hidden",
}


def parse_style(text: str) -> Style:
    """Parse words such as ``bold cyan on black``; raise ValueError on an unknown word."""
    flags: dict[str, bool] = {}
    foreground: Color | None = None
    background: Color | None = None
    next_is_background = False
    for word in text.split(" "):
        if word in _FLAG_WORDS:
            flags[_FLAG_WORDS[word]] = True
        elif word == "on":
            next_is_background = True
        elif word in ("plain", "default"):
            continue
        else:
            color = parse_color(word)
            if color is None:
                raise ValueError(
                    f'invalid value: string "{word}", expected valid color token'
                )
            if next_is_background:
                background = color
            else:
                foreground = color
    return Style(**flags, foreground=foreground, background=background)


def format_style(style: Style) -> str:
    """Render a style as space-separated words; ``plain`` when it has none."""
    words = [
        name
        for name in (
            "bold",
            "italic",
            "dimmed",
            "hidden",
            "blink",
            "reverse",
            "strikethrough",
            "underline",
        )
        if getattr(style, name)
    ]
    if style.foreground is not None:
        words.append(format_color(style.foreground))
    if style.background is not None:
        words.extend(("on", format_color(style.background)))
    return " ".join(words) if words else "plain"