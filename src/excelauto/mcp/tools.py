from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from .apply import AppliedCellItem
from .backend import CellBackendName, CellEngine
from .cell_runner import SetCellsRequest, SetCellsResult, SkippedInstruction, run_set_cells
from .io import PathPolicy
from .session import WorkbookSession
from .shared.output_path import OnConflictPolicy
from .sheet_ops import (
    CreateWorkbookRequest,
    JsonScalar,
    OpenWorkbookRequest,
    ReadRangeRequest,
    WriteRangeRequest,
    create_workbook,
    open_workbook,
    read_range,
    write_range,
)


class OpenExcelToolInput(BaseModel):
    """MCP tool input for opening a workbook."""

    file_path: str


class OpenExcelToolOutput(BaseModel):
    """MCP tool output for opening a workbook."""

    file_path: str
    sheet_names: list[str] = Field(default_factory=list)


class CreateXlsxToolInput(BaseModel):
    """MCP tool input for creating a workbook."""

    file_path: str
    on_conflict: OnConflictPolicy | None = None


class CreateXlsxToolOutput(BaseModel):
    """MCP tool output for creating a workbook."""

    file_path: str
    created: bool
    sheet_names: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class GetRangeToolInput(BaseModel):
    """MCP tool input for reading a range of the current workbook."""

    sheet_name: str
    first_row: int = Field(..., ge=1)
    first_column: int = Field(..., ge=1)
    last_row: int = Field(..., ge=1)
    last_column: int = Field(..., ge=1)
    cell_with_coord: bool = False


class GetRangeToolOutput(BaseModel):
    """MCP tool output for reading a range."""

    sheet_name: str
    range: str
    values: list[list[JsonScalar]] | None = None
    cells: list[str] | None = None


class SetRangeToolInput(BaseModel):
    """MCP tool input for writing a block of values."""

    sheet_name: str
    first_row: int = Field(..., ge=1)
    first_column: int = Field(..., ge=1)
    values: list[list[JsonScalar]]


class SetRangeToolOutput(BaseModel):
    """MCP tool output for writing a block of values."""

    xlsx_path: str
    range: str
    cell_count: int


class SetCellsToolInput(BaseModel):
    """MCP tool input for applying cell instructions."""

    sheet_name: str
    cells: list[str] = Field(default_factory=list)
    backend: CellBackendName | None = None


class SetCellsToolOutput(BaseModel):
    """MCP tool output for applying cell instructions."""

    xlsx_path: str
    applied: list[AppliedCellItem] = Field(default_factory=list)
    skipped: list[SkippedInstruction] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    engine: CellEngine = "openpyxl"


def run_open_excel_tool(
    payload: OpenExcelToolInput,
    *,
    session: WorkbookSession,
    policy: PathPolicy | None = None,
) -> OpenExcelToolOutput:
    """Run the open workbook tool handler.

    Args:
        payload: Tool input payload.
        session: Session that receives the opened workbook.
        policy: Optional path policy for access control.

    Returns:
        Tool output payload.
    """
    result = open_workbook(
        OpenWorkbookRequest(file_path=Path(payload.file_path)), policy=policy
    )
    session.select(Path(result.file_path))
    return OpenExcelToolOutput(
        file_path=result.file_path, sheet_names=result.sheet_names
    )


def run_create_xlsx_tool(
    payload: CreateXlsxToolInput,
    *,
    session: WorkbookSession,
    policy: PathPolicy | None = None,
    on_conflict: OnConflictPolicy | None = None,
) -> CreateXlsxToolOutput:
    """Run the create workbook tool handler.

    Args:
        payload: Tool input payload.
        session: Session that receives the created workbook.
        policy: Optional path policy for access control.
        on_conflict: Server default conflict policy.

    Returns:
        Tool output payload.
    """
    request = CreateWorkbookRequest(
        file_path=Path(payload.file_path),
        on_conflict=payload.on_conflict or on_conflict or "overwrite",
    )
    result = create_workbook(request, policy=policy)
    session.select(Path(result.file_path))
    return CreateXlsxToolOutput(
        file_path=result.file_path,
        created=result.created,
        sheet_names=result.sheet_names,
        warnings=result.warnings,
    )


def run_get_range_tool(
    payload: GetRangeToolInput,
    *,
    session: WorkbookSession,
    policy: PathPolicy | None = None,
) -> GetRangeToolOutput:
    """Run the range read tool handler against the current workbook."""
    request = ReadRangeRequest(
        xlsx_path=session.require_current(),
        sheet_name=payload.sheet_name,
        first_row=payload.first_row,
        first_column=payload.first_column,
        last_row=payload.last_row,
        last_column=payload.last_column,
        cell_with_coord=payload.cell_with_coord,
    )
    result = read_range(request, policy=policy)
    return GetRangeToolOutput(
        sheet_name=result.sheet_name,
        range=result.range,
        values=result.values,
        cells=result.cells,
    )


def run_set_range_tool(
    payload: SetRangeToolInput,
    *,
    session: WorkbookSession,
    policy: PathPolicy | None = None,
    auto_formula: bool = False,
) -> SetRangeToolOutput:
    """Run the range write tool handler against the current workbook."""
    request = WriteRangeRequest(
        xlsx_path=session.require_current(),
        sheet_name=payload.sheet_name,
        first_row=payload.first_row,
        first_column=payload.first_column,
        values=payload.values,
        auto_formula=auto_formula,
    )
    result = write_range(request, policy=policy)
    return SetRangeToolOutput(
        xlsx_path=result.xlsx_path,
        range=result.range,
        cell_count=result.cell_count,
    )


def run_set_cells_tool(
    payload: SetCellsToolInput,
    *,
    session: WorkbookSession,
    policy: PathPolicy | None = None,
    backend: CellBackendName = "auto",
    auto_formula: bool = False,
) -> SetCellsToolOutput:
    """Run the cell instruction tool handler against the current workbook.

    Args:
        payload: Tool input payload.
        session: Session holding the current workbook.
        policy: Optional path policy for access control.
        backend: Server default backend, used when the payload sets none.
        auto_formula: Write content starting with '=' as formulas.

    Returns:
        Tool output payload.
    """
    request = SetCellsRequest(
        xlsx_path=session.require_current(),
        sheet_name=payload.sheet_name,
        cells=payload.cells,
        backend=payload.backend or backend,
        auto_formula=auto_formula,
    )
    result = run_set_cells(request, policy=policy)
    return _to_set_cells_output(result)


def _to_set_cells_output(result: SetCellsResult) -> SetCellsToolOutput:
    """Convert internal result to set cells tool output.

    Args:
        result: Internal batch result.

    Returns:
        Tool output payload.
    """
    return SetCellsToolOutput(
        xlsx_path=result.xlsx_path,
        applied=result.applied,
        skipped=result.skipped,
        warnings=result.warnings,
        engine=result.engine,
    )
