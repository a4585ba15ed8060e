from __future__ import annotations

from pathlib import Path

from openpyxl import Workbook
import pytest

from excelauto.mcp import tools
from excelauto.mcp.cell_runner import SetCellsRequest, SetCellsResult
from excelauto.mcp.session import WorkbookSession
from excelauto.mcp.sheet_ops import CreateWorkbookRequest, CreateWorkbookResult


def _create_workbook(path: Path) -> None:
    workbook = Workbook()
    workbook.active.title = "Sheet1"
    workbook.save(path)
    workbook.close()


def test_run_open_excel_tool_selects_workbook(tmp_path: Path) -> None:
    path = tmp_path / "book.xlsx"
    _create_workbook(path)
    session = WorkbookSession()
    result = tools.run_open_excel_tool(
        tools.OpenExcelToolInput(file_path=str(path)), session=session
    )
    assert result.sheet_names == ["Sheet1"]
    assert session.current_path == path.resolve()


def test_run_create_xlsx_tool_prefers_payload_on_conflict(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    captured: dict[str, object] = {}

    def _fake_create_workbook(
        request: CreateWorkbookRequest, *, policy: object | None = None
    ) -> CreateWorkbookResult:
        captured["request"] = request
        return CreateWorkbookResult(
            file_path=str(request.file_path), created=True, sheet_names=["Sheet1"]
        )

    monkeypatch.setattr(tools, "create_workbook", _fake_create_workbook)
    session = WorkbookSession()
    payload = tools.CreateXlsxToolInput(
        file_path=str(tmp_path / "new.xlsx"), on_conflict="skip"
    )
    tools.run_create_xlsx_tool(payload, session=session, on_conflict="rename")
    request = captured["request"]
    assert isinstance(request, CreateWorkbookRequest)
    assert request.on_conflict == "skip"
    assert session.current_path == tmp_path / "new.xlsx"


def test_run_create_xlsx_tool_uses_default_on_conflict(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    captured: dict[str, object] = {}

    def _fake_create_workbook(
        request: CreateWorkbookRequest, *, policy: object | None = None
    ) -> CreateWorkbookResult:
        captured["request"] = request
        return CreateWorkbookResult(file_path=str(request.file_path), created=True)

    monkeypatch.setattr(tools, "create_workbook", _fake_create_workbook)
    payload = tools.CreateXlsxToolInput(file_path=str(tmp_path / "new.xlsx"))
    tools.run_create_xlsx_tool(
        payload, session=WorkbookSession(), on_conflict="rename"
    )
    request = captured["request"]
    assert isinstance(request, CreateWorkbookRequest)
    assert request.on_conflict == "rename"


def test_range_and_cell_tools_require_current_workbook() -> None:
    session = WorkbookSession()
    with pytest.raises(ValueError, match="No Excel file is open"):
        tools.run_get_range_tool(
            tools.GetRangeToolInput(
                sheet_name="Sheet1",
                first_row=1,
                first_column=1,
                last_row=1,
                last_column=1,
            ),
            session=session,
        )
    with pytest.raises(ValueError, match="No Excel file is open"):
        tools.run_set_range_tool(
            tools.SetRangeToolInput(
                sheet_name="Sheet1", first_row=1, first_column=1, values=[["x"]]
            ),
            session=session,
        )
    with pytest.raises(ValueError, match="No Excel file is open"):
        tools.run_set_cells_tool(
            tools.SetCellsToolInput(sheet_name="Sheet1", cells=["@A1"]),
            session=session,
        )


def test_run_set_cells_tool_uses_default_backend(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    captured: dict[str, object] = {}

    def _fake_run_set_cells(
        request: SetCellsRequest, *, policy: object | None = None
    ) -> SetCellsResult:
        captured["request"] = request
        return SetCellsResult(
            xlsx_path=str(request.xlsx_path), sheet_name=request.sheet_name
        )

    monkeypatch.setattr(tools, "run_set_cells", _fake_run_set_cells)
    session = WorkbookSession(current_path=tmp_path / "book.xlsx")
    tools.run_set_cells_tool(
        tools.SetCellsToolInput(sheet_name="Sheet1", cells=["@A1"]),
        session=session,
        backend="openpyxl",
        auto_formula=True,
    )
    request = captured["request"]
    assert isinstance(request, SetCellsRequest)
    assert request.backend == "openpyxl"
    assert request.auto_formula is True
    assert request.xlsx_path == tmp_path / "book.xlsx"

    tools.run_set_cells_tool(
        tools.SetCellsToolInput(sheet_name="Sheet1", cells=[], backend="com"),
        session=session,
        backend="openpyxl",
    )
    request = captured["request"]
    assert isinstance(request, SetCellsRequest)
    assert request.backend == "com"


def test_tool_round_trip_on_real_workbook(tmp_path: Path) -> None:
    session = WorkbookSession()
    path = tmp_path / "report.xlsx"
    created = tools.run_create_xlsx_tool(
        tools.CreateXlsxToolInput(file_path=str(path)), session=session
    )
    assert created.created is True

    written = tools.run_set_range_tool(
        tools.SetRangeToolInput(
            sheet_name="Sheet1",
            first_row=1,
            first_column=1,
            values=[["item", "qty"], ["bolt", 4]],
        ),
        session=session,
    )
    assert written.range == "A1:B2"

    cells = tools.run_set_cells_tool(
        tools.SetCellsToolInput(
            sheet_name="Sheet1", cells=["'nut'@A3#B", "'6'@B3", "broken"]
        ),
        session=session,
    )
    assert [item.cell for item in cells.applied] == ["A3", "B3"]
    assert [item.index for item in cells.skipped] == [2]
    assert cells.engine == "openpyxl"

    read = tools.run_get_range_tool(
        tools.GetRangeToolInput(
            sheet_name="Sheet1",
            first_row=1,
            first_column=1,
            last_row=3,
            last_column=2,
            cell_with_coord=True,
        ),
        session=session,
    )
    assert read.cells == [
        "item@A1",
        "qty@B1",
        "bolt@A2",
        "4@B2",
        "nut@A3",
        "6@B3",
    ]
