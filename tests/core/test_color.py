from __future__ import annotations

import logging

import pytest

from excelauto.core import BLACK, RGBColor, hex_to_rgb


def test_hex_to_rgb() -> None:
    assert hex_to_rgb("FF0000") == RGBColor(r=255, g=0, b=0)
    assert hex_to_rgb("00ff7f") == RGBColor(r=0, g=255, b=127)


@pytest.mark.parametrize("value", ["", "FFF", "FF00000", "#FF0000"])
def test_hex_to_rgb_wrong_length_is_black(value: str) -> None:
    assert hex_to_rgb(value) == BLACK


def test_hex_to_rgb_non_hex_is_black_and_warns(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING, logger="excelauto.core.color"):
        assert hex_to_rgb("GG0000") == BLACK
    assert "Invalid hex color string: GG0000" in caplog.text


def test_color_conversions() -> None:
    color = RGBColor(r=0x12, g=0x34, b=0x56)
    assert color.to_hex() == "123456"
    assert color.to_argb() == "FF123456"
    assert color.to_excel_rgb() == 0x12 + 0x34 * 256 + 0x56 * 65536


def test_rgb_color_bounds() -> None:
    with pytest.raises(ValueError):
        RGBColor(r=256, g=0, b=0)
