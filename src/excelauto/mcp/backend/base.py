from __future__ import annotations

from typing import Protocol, runtime_checkable

from excelauto.core import HorizontalAlign, RGBColor

from .types import VerticalAlign


@runtime_checkable
class CellBackend(Protocol):
    """Cell mutation capabilities required to apply a parsed cell edit.

    Coordinates are 1-based. Each call changes exactly one attribute of one
    cell and leaves every other attribute untouched.
    """

    def set_cell_text(self, row: int, column: int, text: str) -> None: ...

    def set_cell_alignment(
        self,
        row: int,
        column: int,
        horizontal: HorizontalAlign | None,
        vertical: VerticalAlign | None,
    ) -> None: ...

    def set_cell_bold(self, row: int, column: int, enabled: bool) -> None: ...

    def set_cell_italic(self, row: int, column: int, enabled: bool) -> None: ...

    def set_cell_underline(self, row: int, column: int, enabled: bool) -> None: ...

    def set_cell_font_color(self, row: int, column: int, color: RGBColor) -> None: ...

    def set_cell_background_color(
        self, row: int, column: int, color: RGBColor
    ) -> None: ...


__all__ = ["CellBackend"]
