"""
Chat color parsing.

Colors are stored and edited as "r,g,b" text. Parsing is all-or-nothing:
a value is either three in-range channels or an InvalidColorFormat error.
"""

import re

from ..exceptions import InvalidColorFormat
from ..models.override_record import Rgb

_CHANNEL_PATTERN = re.compile(r"^\s*(\d+)\s*$", re.ASCII)
_CHANNEL_MAX = 255


def _parse_channel(text: str, field: str) -> int:
    match = _CHANNEL_PATTERN.match(field)
    if match is None:
        raise InvalidColorFormat(text, reason=f"channel {field!r} is not an unsigned integer")
    value = int(match.group(1))
    if value > _CHANNEL_MAX:
        raise InvalidColorFormat(text, reason=f"channel {value} is out of range 0-255")
    return value


def parse_color(text: str) -> Rgb:
    """
    Parse "r,g,b" into an Rgb.

    Raises:
        InvalidColorFormat: wrong field count, non-numeric field or a value outside 0-255
    """
    if not isinstance(text, str):
        raise InvalidColorFormat(repr(text), reason="color is not text")

    fields = text.split(",")
    if len(fields) != 3:
        raise InvalidColorFormat(text, reason=f"expected 3 fields, got {len(fields)}")

    r, g, b = (_parse_channel(text, field) for field in fields)
    return Rgb(r, g, b)


def format_color(color: Rgb) -> str:
    """Render an Rgb back to its stored "r,g,b" form."""
    return f"{color.r},{color.g},{color.b}"
