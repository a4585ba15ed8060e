from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from copy import copy
import logging
from pathlib import Path
from typing import Any

from openpyxl.styles import PatternFill

from excelauto.core import HorizontalAlign, RGBColor
from excelauto.mcp.workbook import openpyxl_workbook, select_openpyxl_sheet

from .types import VerticalAlign

logger = logging.getLogger(__name__)


class OpenpyxlCellBackend:
    """Cell backend writing to an openpyxl worksheet."""

    def __init__(self, sheet: Any, *, auto_formula: bool = False) -> None:
        self._sheet = sheet
        self._auto_formula = auto_formula

    def _cell(self, row: int, column: int) -> Any:
        return self._sheet.cell(row=row, column=column)

    def set_cell_text(self, row: int, column: int, text: str) -> None:
        cell = self._cell(row, column)
        cell.value = text
        if text.startswith("=") and not self._auto_formula:
            # openpyxl binds "=..." as a formula; keep it as literal text.
            cell.data_type = "s"

    def set_cell_alignment(
        self,
        row: int,
        column: int,
        horizontal: HorizontalAlign | None,
        vertical: VerticalAlign | None,
    ) -> None:
        cell = self._cell(row, column)
        alignment = copy(cell.alignment)
        if horizontal is not None:
            alignment.horizontal = horizontal
        if vertical is not None:
            alignment.vertical = vertical
        cell.alignment = alignment

    def set_cell_bold(self, row: int, column: int, enabled: bool) -> None:
        cell = self._cell(row, column)
        font = copy(cell.font)
        font.bold = enabled
        cell.font = font

    def set_cell_italic(self, row: int, column: int, enabled: bool) -> None:
        cell = self._cell(row, column)
        font = copy(cell.font)
        font.italic = enabled
        cell.font = font

    def set_cell_underline(self, row: int, column: int, enabled: bool) -> None:
        cell = self._cell(row, column)
        font = copy(cell.font)
        font.underline = "single" if enabled else None
        cell.font = font

    def set_cell_font_color(self, row: int, column: int, color: RGBColor) -> None:
        cell = self._cell(row, column)
        font = copy(cell.font)
        font.color = color.to_argb()
        cell.font = font

    def set_cell_background_color(
        self, row: int, column: int, color: RGBColor
    ) -> None:
        argb = color.to_argb()
        self._cell(row, column).fill = PatternFill(
            fill_type="solid",
            start_color=argb,
            end_color=argb,
        )


@contextmanager
def open_openpyxl_backend(
    file_path: Path, sheet_name: str, *, auto_formula: bool = False
) -> Iterator[OpenpyxlCellBackend]:
    """Open a sheet for editing and save the workbook in place on success.

    Args:
        file_path: Workbook path (.xlsx or .xlsm).
        sheet_name: Target sheet name.
        auto_formula: Write text starting with '=' as formulas.

    Yields:
        Backend bound to the selected sheet.
    """
    with openpyxl_workbook(file_path, data_only=False, read_only=False) as workbook:
        sheet = select_openpyxl_sheet(workbook, sheet_name)
        yield OpenpyxlCellBackend(sheet, auto_formula=auto_formula)
        workbook.save(file_path)
        logger.info("Saved workbook via openpyxl: %s", file_path)


__all__ = ["OpenpyxlCellBackend", "open_openpyxl_backend"]
