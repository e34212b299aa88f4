"""RGB colours parsed from hexadecimal notation."""

from __future__ import annotations

import re
from dataclasses import dataclass

_HEX_COLOR = re.compile(r"[0-9a-fA-F]{3}|[0-9a-fA-F]{6}")


@dataclass(frozen=True)
class Color:
    """An 8-bit RGB colour."""

    r: int = 0
    g: int = 0
    b: int = 0

    @classmethod
    def from_hex(cls, hexcolor: str) -> Color:
        """Parse a 3- or 6-digit hex colour such as ``"fff"`` or ``"a1b2c3"``."""
        if not _HEX_COLOR.fullmatch(hexcolor):
            raise ValueError(f"Invalid hex color: {hexcolor}")

        if len(hexcolor) == 3:
            r, g, b = (int(ch, 16) * 17 for ch in hexcolor)
        else:
            r, g, b = (int(hexcolor[i:i + 2], 16) for i in (0, 2, 4))

        return cls(r, g, b)