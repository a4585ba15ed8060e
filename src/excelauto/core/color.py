from __future__ import annotations

import logging
import re

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

_HEX6_PATTERN = re.compile(r"^[0-9A-Fa-f]{6}$")


class RGBColor(BaseModel):
    """Immutable 8-bit RGB triple."""

    model_config = ConfigDict(frozen=True)

    r: int = Field(default=0, ge=0, le=255)
    g: int = Field(default=0, ge=0, le=255)
    b: int = Field(default=0, ge=0, le=255)

    def to_hex(self) -> str:
        """Return ``RRGGBB`` in uppercase."""
        return f"{self.r:02X}{self.g:02X}{self.b:02X}"

    def to_argb(self) -> str:
        """Return opaque ``AARRGGBB`` for workbook internals."""
        return f"FF{self.to_hex()}"

    def to_excel_rgb(self) -> int:
        """Return the Excel COM RGB integer."""
        return self.r + self.g * 256 + self.b * 65_536


BLACK = RGBColor(r=0, g=0, b=0)


def hex_to_rgb(value: str) -> RGBColor:
    """Decode a 6-digit hex string into an RGB color.

    Malformed input never raises: a wrong length or a non-hex digit decodes
    to black.

    Args:
        value: Hex text such as ``"FF0000"``.

    Returns:
        Decoded color, or black for malformed input.
    """
    if len(value) != 6:
        return BLACK
    if not _HEX6_PATTERN.match(value):
        logger.warning("Invalid hex color string: %s", value)
        return BLACK
    return RGBColor(
        r=int(value[0:2], 16),
        g=int(value[2:4], 16),
        b=int(value[4:6], 16),
    )
