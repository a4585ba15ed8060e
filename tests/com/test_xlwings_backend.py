from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path

from openpyxl import Workbook, load_workbook
import pytest
import xlwings as xw

from excelauto.mcp.cell_runner import SetCellsRequest, run_set_cells
from excelauto.mcp.backend.xlwings_backend import (
    list_xlwings_sheet_names,
    open_xlwings_backend,
)
from excelauto.mcp.sheet_ops import OpenWorkbookRequest, open_workbook

pytestmark = pytest.mark.com


@contextmanager
def _excel_app() -> xw.App:
    app = xw.App(add_book=False, visible=False)
    try:
        yield app
    finally:
        try:
            app.quit()
        except Exception:
            try:
                app.kill()
            except Exception:
                pass


def _create_workbook(path: Path) -> None:
    workbook = Workbook()
    workbook.active.title = "Sheet1"
    workbook.save(path)
    workbook.close()


def test_run_set_cells_via_com(tmp_path: Path) -> None:
    path = tmp_path / "book.xlsx"
    _create_workbook(path)
    result = run_set_cells(
        SetCellsRequest(
            xlsx_path=path,
            sheet_name="Sheet1",
            cells=["'Total'@B3#B↔$FF0000%00FF00", "'=1+1'@C1", "oops"],
            backend="com",
        )
    )
    assert result.engine == "com"
    assert [item.cell for item in result.applied] == ["B3", "C1"]
    assert [item.index for item in result.skipped] == [2]

    workbook = load_workbook(path)
    sheet = workbook["Sheet1"]
    assert sheet["B3"].value == "Total"
    assert sheet["B3"].font.bold is True
    assert sheet["B3"].alignment.horizontal == "center"
    assert sheet["B3"].font.color.rgb == "FFFF0000"
    assert sheet["B3"].fill.start_color.rgb == "FF00FF00"
    assert sheet["C1"].value == "=1+1"
    assert sheet["C1"].data_type == "s"
    workbook.close()


def test_open_xlwings_backend_missing_sheet(tmp_path: Path) -> None:
    path = tmp_path / "book.xlsx"
    _create_workbook(path)
    with pytest.raises(ValueError, match="Sheet not found: Nope"):
        with open_xlwings_backend(path, "Nope"):
            pass


def test_underline_toggle_via_com(tmp_path: Path) -> None:
    path = tmp_path / "book.xlsx"
    _create_workbook(path)
    with open_xlwings_backend(path, "Sheet1") as backend:
        backend.set_cell_underline(1, 1, True)
        backend.set_cell_italic(1, 1, True)
    with _excel_app() as app:
        book = app.books.open(str(path))
        try:
            font = book.sheets["Sheet1"].range("A1").api.Font
            assert font.Underline == 2
            assert font.Italic is True
        finally:
            book.close()


def test_open_xls_workbook_via_com(tmp_path: Path) -> None:
    path = tmp_path / "legacy.xls"
    with _excel_app() as app:
        book = app.books.add()
        try:
            book.sheets[0].name = "Legacy"
            # xlExcel8
            book.api.SaveAs(str(path), FileFormat=56)
        finally:
            book.close()
    assert list_xlwings_sheet_names(path) == ["Legacy"]
    result = open_workbook(OpenWorkbookRequest(file_path=path))
    assert result.sheet_names == ["Legacy"]
