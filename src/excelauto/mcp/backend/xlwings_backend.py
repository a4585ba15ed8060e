from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from pathlib import Path
from typing import Any, Final

import xlwings as xw

from excelauto.cli.availability import quit_app_safely
from excelauto.core import HorizontalAlign, RGBColor

from .types import VerticalAlign

logger = logging.getLogger(__name__)

_HORIZONTAL_ALIGN_MAP: Final[dict[HorizontalAlign, int]] = {
    "left": -4131,
    "center": -4108,
    "right": -4152,
}
_VERTICAL_ALIGN_MAP: Final[dict[VerticalAlign, int]] = {
    "top": -4160,
    "center": -4108,
    "bottom": -4107,
}
_XL_UNDERLINE_SINGLE: Final[int] = 2
_XL_UNDERLINE_NONE: Final[int] = -4142


class XlwingsCellBackend:
    """Cell backend driving Excel through COM."""

    def __init__(self, sheet: Any, *, auto_formula: bool = False) -> None:
        self._sheet = sheet
        self._auto_formula = auto_formula

    def _range(self, row: int, column: int) -> Any:
        return self._sheet.range((row, column))

    def _api(self, row: int, column: int) -> Any:
        return self._range(row, column).api

    def set_cell_text(self, row: int, column: int, text: str) -> None:
        target = self._range(row, column)
        if text.startswith("=") and not self._auto_formula:
            target.number_format = "@"
        target.value = text

    def set_cell_alignment(
        self,
        row: int,
        column: int,
        horizontal: HorizontalAlign | None,
        vertical: VerticalAlign | None,
    ) -> None:
        api = self._api(row, column)
        if horizontal is not None:
            api.HorizontalAlignment = _HORIZONTAL_ALIGN_MAP[horizontal]
        if vertical is not None:
            api.VerticalAlignment = _VERTICAL_ALIGN_MAP[vertical]

    def set_cell_bold(self, row: int, column: int, enabled: bool) -> None:
        self._api(row, column).Font.Bold = enabled

    def set_cell_italic(self, row: int, column: int, enabled: bool) -> None:
        self._api(row, column).Font.Italic = enabled

    def set_cell_underline(self, row: int, column: int, enabled: bool) -> None:
        self._api(row, column).Font.Underline = (
            _XL_UNDERLINE_SINGLE if enabled else _XL_UNDERLINE_NONE
        )

    def set_cell_font_color(self, row: int, column: int, color: RGBColor) -> None:
        self._api(row, column).Font.Color = color.to_excel_rgb()

    def set_cell_background_color(
        self, row: int, column: int, color: RGBColor
    ) -> None:
        self._api(row, column).Interior.Color = color.to_excel_rgb()


def _close_workbook_safely(workbook: Any) -> None:
    """Close workbook and ignore cleanup failures."""
    try:
        workbook.close()
    except Exception:
        return


@contextmanager
def open_xlwings_backend(
    file_path: Path, sheet_name: str, *, auto_formula: bool = False
) -> Iterator[XlwingsCellBackend]:
    """Open a sheet in a dedicated Excel instance and save in place on success.

    Args:
        file_path: Workbook path.
        sheet_name: Target sheet name.
        auto_formula: Write text starting with '=' as formulas.

    Yields:
        Backend bound to the selected sheet.
    """
    app = xw.App(add_book=False, visible=False)
    app.display_alerts = False
    app.screen_updating = False
    try:
        workbook = app.books.open(str(file_path))
        try:
            sheets = {sheet.name: sheet for sheet in workbook.sheets}
            sheet = sheets.get(sheet_name)
            if sheet is None:
                available = ", ".join(sheets)
                raise ValueError(
                    f"Sheet not found: {sheet_name}. Available sheets: {available}"
                )
            yield XlwingsCellBackend(sheet, auto_formula=auto_formula)
            workbook.save()
            logger.info("Saved workbook via Excel COM: %s", file_path)
        except ValueError:
            raise
        except Exception as exc:
            raise RuntimeError(f"COM edit failed: {exc}") from exc
        finally:
            _close_workbook_safely(workbook)
    finally:
        quit_app_safely(app)


def list_xlwings_sheet_names(file_path: Path) -> list[str]:
    """List sheet names through a dedicated Excel instance."""
    app = xw.App(add_book=False, visible=False)
    app.display_alerts = False
    try:
        workbook = app.books.open(str(file_path), read_only=True)
        try:
            return [sheet.name for sheet in workbook.sheets]
        except Exception as exc:
            raise RuntimeError(f"COM sheet listing failed: {exc}") from exc
        finally:
            _close_workbook_safely(workbook)
    finally:
        quit_app_safely(app)


__all__ = ["XlwingsCellBackend", "list_xlwings_sheet_names", "open_xlwings_backend"]
