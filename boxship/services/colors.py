# ==== BOX COLOR CONVERSIONS ==== #

"""
Color conversions between channel values, the stored "r,g,b" form and
the "#rrggbb" form used by color pickers.

Channel values are clamped into [0, 255] before they are serialized.
Parsing never clamps: a string that cannot be read raises MalformedColor.
"""

import re
from typing import NamedTuple

from boxship.business.errors import MalformedColor


CHANNEL_MIN = 0
CHANNEL_MAX = 255

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class RGBColor(NamedTuple):
    r: int
    g: int
    b: int


def clamp_channel(value: int) -> int:
    """Constrain a channel value into [0, 255]."""
    return max(CHANNEL_MIN, min(CHANNEL_MAX, int(value)))


def clamp_color(r: int, g: int, b: int) -> RGBColor:
    return RGBColor(clamp_channel(r), clamp_channel(g), clamp_channel(b))


# ==== STORAGE FORM ==== #


def to_storage_string(r: int, g: int, b: int) -> str:
    """
    Serialize channels as "r,g,b" after clamping.

    >>> to_storage_string(300, -5, 128)
    '255,0,128'
    """
    color = clamp_color(r, g, b)
    return f"{color.r},{color.g},{color.b}"


def from_storage_string(value: str) -> RGBColor:
    """
    Parse a stored "r,g,b" string.

    Args:
        value (str): Comma-joined decimal channels

    Returns:
        RGBColor: Parsed channels, not clamped

    Raises:
        MalformedColor: If there are not exactly three integer parts
    """
    if not isinstance(value, str):
        raise MalformedColor(value, "expected a string")

    parts = value.split(",")
    if len(parts) != 3:
        raise MalformedColor(value, f"expected 3 parts, got {len(parts)}")

    channels = []
    for part in parts:
        try:
            channels.append(int(part.strip()))
        except ValueError:
            raise MalformedColor(value, f"{part!r} is not an integer") from None

    return RGBColor(*channels)


# ==== HEX FORM ==== #


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """
    Format channels as "#rrggbb" with lowercase, zero-padded digits.

    >>> rgb_to_hex(255, 255, 255)
    '#ffffff'
    """
    color = clamp_color(r, g, b)
    return "#" + "".join(f"{channel:02x}" for channel in color)


def hex_to_rgb(value: str) -> RGBColor:
    """
    Parse "#RRGGBB" (either case) into channels.

    Raises:
        MalformedColor: If the value is not '#' followed by six hex digits
    """
    if not isinstance(value, str) or not _HEX_COLOR.match(value):
        raise MalformedColor(value, "expected #RRGGBB")

    return RGBColor(
        int(value[1:3], 16),
        int(value[3:5], 16),
        int(value[5:7], 16),
    )


def storage_string_to_hex(value: str) -> str:
    """Convert a stored "r,g,b" string to the picker form."""
    return rgb_to_hex(*from_storage_string(value))


def hex_to_storage_string(value: str) -> str:
    """Convert a picker "#rrggbb" value to the stored form."""
    return to_storage_string(*hex_to_rgb(value))
