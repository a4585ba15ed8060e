from __future__ import annotations

from datetime import date, datetime, time
import logging
from pathlib import Path
from typing import Any, TypeAlias

from pydantic import BaseModel, Field, model_validator

from excelauto.cli.availability import get_com_availability
from excelauto.core import encode_address, format_range

from .io import PathPolicy, resolve_existing_workbook, resolve_path
from .shared.output_path import OnConflictPolicy, apply_conflict_policy, ensure_output_dir
from .workbook import (
    OPENPYXL_EXTENSIONS,
    create_openpyxl_workbook,
    ensure_supported_extension,
    openpyxl_workbook,
    select_openpyxl_sheet,
)

logger = logging.getLogger(__name__)

JsonScalar: TypeAlias = str | int | float | bool | None


class OpenWorkbookRequest(BaseModel):
    """Input model for opening a workbook."""

    file_path: Path


class OpenWorkbookResult(BaseModel):
    """Output model for opening a workbook."""

    file_path: str
    sheet_names: list[str] = Field(default_factory=list)


class CreateWorkbookRequest(BaseModel):
    """Input model for creating a workbook."""

    file_path: Path
    on_conflict: OnConflictPolicy = "overwrite"
    initial_sheet_name: str = Field(default="Sheet1", min_length=1, max_length=31)


class CreateWorkbookResult(BaseModel):
    """Output model for creating a workbook."""

    file_path: str
    created: bool
    sheet_names: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ReadRangeRequest(BaseModel):
    """Input model for reading a rectangular range."""

    xlsx_path: Path
    sheet_name: str = Field(..., min_length=1)
    first_row: int = Field(..., ge=1)
    first_column: int = Field(..., ge=1)
    last_row: int = Field(..., ge=1)
    last_column: int = Field(..., ge=1)
    cell_with_coord: bool = False
    max_cells: int = Field(default=10_000, ge=1)

    @model_validator(mode="after")
    def _validate_bounds(self) -> ReadRangeRequest:
        if self.last_row < self.first_row:
            raise ValueError("last_row must be greater than or equal to first_row.")
        if self.last_column < self.first_column:
            raise ValueError(
                "last_column must be greater than or equal to first_column."
            )
        return self


class ReadRangeResult(BaseModel):
    """Output model for range reading.

    Exactly one of ``values`` or ``cells`` is populated depending on
    ``cell_with_coord``.
    """

    sheet_name: str
    range: str
    values: list[list[JsonScalar]] | None = None
    cells: list[str] | None = None


class WriteRangeRequest(BaseModel):
    """Input model for writing a 2D block of values."""

    xlsx_path: Path
    sheet_name: str = Field(..., min_length=1)
    first_row: int = Field(..., ge=1)
    first_column: int = Field(..., ge=1)
    values: list[list[JsonScalar]] = Field(..., min_length=1)
    auto_formula: bool = False


class WriteRangeResult(BaseModel):
    """Output model for range writing."""

    xlsx_path: str
    sheet_name: str
    range: str
    cell_count: int


def open_workbook(
    request: OpenWorkbookRequest, *, policy: PathPolicy | None = None
) -> OpenWorkbookResult:
    """Open a workbook and list its sheet names.

    Args:
        request: Open request.
        policy: Optional path policy for access control.

    Returns:
        Resolved path and sheet names in workbook order.
    """
    resolved = resolve_existing_workbook(request.file_path, policy=policy)
    ensure_supported_extension(resolved)
    if resolved.suffix.lower() in OPENPYXL_EXTENSIONS:
        with openpyxl_workbook(resolved, data_only=True, read_only=True) as workbook:
            sheet_names = list(workbook.sheetnames)
    else:
        com = get_com_availability()
        if not com.available:
            raise ValueError(
                f"{resolved.suffix} files require Windows Excel COM (xlwings) "
                f"in this environment: {com.reason}"
            )
        sheet_names = _list_com_sheet_names(resolved)
    logger.info("Opened workbook %s with %d sheet(s).", resolved, len(sheet_names))
    return OpenWorkbookResult(file_path=str(resolved), sheet_names=sheet_names)


def create_workbook(
    request: CreateWorkbookRequest, *, policy: PathPolicy | None = None
) -> CreateWorkbookResult:
    """Create an empty workbook, honoring the conflict policy.

    Args:
        request: Create request.
        policy: Optional path policy for access control.

    Returns:
        Final workbook path, whether a file was written, and warnings.
    """
    resolved = resolve_path(request.file_path, policy=policy)
    if resolved.suffix.lower() not in OPENPYXL_EXTENSIONS:
        raise ValueError(
            f"Only .xlsx/.xlsm workbooks can be created: {resolved.name}"
        )
    final_path, warning, skipped = apply_conflict_policy(
        resolved, request.on_conflict
    )
    warnings = [warning] if warning else []
    if skipped:
        with openpyxl_workbook(final_path, data_only=True, read_only=True) as workbook:
            sheet_names = list(workbook.sheetnames)
        return CreateWorkbookResult(
            file_path=str(final_path),
            created=False,
            sheet_names=sheet_names,
            warnings=warnings,
        )
    ensure_output_dir(final_path)
    create_openpyxl_workbook(final_path, initial_sheet_name=request.initial_sheet_name)
    logger.info("Created workbook: %s", final_path)
    return CreateWorkbookResult(
        file_path=str(final_path),
        created=True,
        sheet_names=[request.initial_sheet_name],
        warnings=warnings,
    )


def read_range(
    request: ReadRangeRequest, *, policy: PathPolicy | None = None
) -> ReadRangeResult:
    """Read a rectangular range from a workbook.

    Args:
        request: Range read request.
        policy: Optional path policy for access control.

    Returns:
        Range read result in the requested shape.
    """
    resolved = resolve_existing_workbook(request.xlsx_path, policy=policy)
    normalized_range = format_range(
        request.first_row,
        request.first_column,
        request.last_row,
        request.last_column,
    )
    cell_count = (request.last_row - request.first_row + 1) * (
        request.last_column - request.first_column + 1
    )
    if cell_count > request.max_cells:
        raise ValueError(
            "Requested range exceeds max_cells. "
            f"range={normalized_range}, cells={cell_count}, max_cells={request.max_cells}"
        )

    with openpyxl_workbook(resolved, data_only=True, read_only=True) as workbook:
        sheet = select_openpyxl_sheet(workbook, request.sheet_name)
        rows = [
            [_normalize_value(value) for value in row]
            for row in sheet.iter_rows(
                min_row=request.first_row,
                max_row=request.last_row,
                min_col=request.first_column,
                max_col=request.last_column,
                values_only=True,
            )
        ]
    width = request.last_column - request.first_column + 1
    height = request.last_row - request.first_row + 1
    # Read-only sheets stop at the last populated row; pad to the requested shape.
    rows = [row + [None] * (width - len(row)) for row in rows]
    rows.extend([None] * width for _ in range(height - len(rows)))

    if not request.cell_with_coord:
        return ReadRangeResult(
            sheet_name=request.sheet_name, range=normalized_range, values=rows
        )
    cells: list[str] = []
    for row_offset, row in enumerate(rows):
        for col_offset, value in enumerate(row):
            if value is None or value == "":
                continue
            address = encode_address(
                request.first_row + row_offset, request.first_column + col_offset
            )
            cells.append(f"{_format_cell_text(value)}@{address}")
    return ReadRangeResult(
        sheet_name=request.sheet_name, range=normalized_range, cells=cells
    )


def write_range(
    request: WriteRangeRequest, *, policy: PathPolicy | None = None
) -> WriteRangeResult:
    """Write a 2D block of values starting at the given cell.

    Rows may differ in length. ``None`` clears the target cell.

    Args:
        request: Range write request.
        policy: Optional path policy for access control.

    Returns:
        Written range and number of cells touched.
    """
    resolved = resolve_existing_workbook(request.xlsx_path, policy=policy)
    width = max(len(row) for row in request.values)
    if width == 0:
        raise ValueError("values must contain at least one cell.")
    cell_count = 0
    with openpyxl_workbook(resolved, data_only=False, read_only=False) as workbook:
        sheet = select_openpyxl_sheet(workbook, request.sheet_name)
        for row_offset, row_values in enumerate(request.values):
            for col_offset, value in enumerate(row_values):
                cell = sheet.cell(
                    row=request.first_row + row_offset,
                    column=request.first_column + col_offset,
                )
                cell.value = value
                if (
                    isinstance(value, str)
                    and value.startswith("=")
                    and not request.auto_formula
                ):
                    cell.data_type = "s"
                cell_count += 1
        workbook.save(resolved)
    written_range = format_range(
        request.first_row,
        request.first_column,
        request.first_row + len(request.values) - 1,
        request.first_column + width - 1,
    )
    logger.info(
        "Wrote %d cell(s) to %s!%s in %s.",
        cell_count,
        request.sheet_name,
        written_range,
        resolved,
    )
    return WriteRangeResult(
        xlsx_path=str(resolved),
        sheet_name=request.sheet_name,
        range=written_range,
        cell_count=cell_count,
    )


def _list_com_sheet_names(file_path: Path) -> list[str]:
    from .backend.xlwings_backend import list_xlwings_sheet_names

    return list_xlwings_sheet_names(file_path)


def _normalize_value(value: Any) -> JsonScalar:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _format_cell_text(value: JsonScalar) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)
