from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any
import warnings

from openpyxl import Workbook, load_workbook

SUPPORTED_EXTENSIONS = frozenset({".xlsx", ".xlsm", ".xls"})
OPENPYXL_EXTENSIONS = frozenset({".xlsx", ".xlsm"})


@contextmanager
def openpyxl_workbook(
    file_path: Path, *, data_only: bool, read_only: bool
) -> Iterator[Any]:
    """Open an openpyxl workbook and ensure it is closed.

    Args:
        file_path: Workbook path.
        data_only: Whether to read cached formula results.
        read_only: Whether to open in read-only mode.

    Yields:
        openpyxl workbook instance.
    """
    if file_path.suffix.lower() not in OPENPYXL_EXTENSIONS:
        raise ValueError(f"openpyxl cannot open {file_path.suffix} files: {file_path}")
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message="Unknown extension is not supported and will be removed",
            category=UserWarning,
            module="openpyxl",
        )
        warnings.filterwarnings(
            "ignore",
            message="Data Validation extension is not supported and will be removed",
            category=UserWarning,
            module="openpyxl",
        )
        wb = load_workbook(
            file_path,
            data_only=data_only,
            read_only=read_only,
            keep_vba=file_path.suffix.lower() == ".xlsm",
        )
    try:
        yield wb
    finally:
        try:
            wb.close()
        except Exception:
            pass


def create_openpyxl_workbook(file_path: Path, *, initial_sheet_name: str) -> None:
    """Create an empty workbook with a single named sheet.

    Args:
        file_path: Destination path (.xlsx or .xlsm).
        initial_sheet_name: Title of the first worksheet.
    """
    if file_path.suffix.lower() not in OPENPYXL_EXTENSIONS:
        raise ValueError(
            f"Only .xlsx/.xlsm workbooks can be created: {file_path.name}"
        )
    workbook = Workbook()
    try:
        active_sheet = workbook.active
        if active_sheet is None:
            raise RuntimeError("Failed to create default worksheet.")
        active_sheet.title = initial_sheet_name
        workbook.save(file_path)
    finally:
        workbook.close()


def select_openpyxl_sheet(workbook: Any, sheet_name: str) -> Any:
    """Return a worksheet by name or raise with the available names."""
    if sheet_name not in workbook.sheetnames:
        available = ", ".join(workbook.sheetnames)
        raise ValueError(f"Sheet not found: {sheet_name}. Available sheets: {available}")
    return workbook[sheet_name]


def ensure_supported_extension(path: Path) -> None:
    """Validate the workbook extension."""
    if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        raise ValueError(
            f"Unsupported workbook extension: {path.suffix or '<none>'}. "
            "Use .xlsx, .xlsm or .xls."
        )
