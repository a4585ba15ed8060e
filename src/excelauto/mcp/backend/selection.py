from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .base import CellBackend
from .openpyxl_backend import open_openpyxl_backend
from .types import CellBackendName, CellEngine


def select_cell_engine(
    *, backend: CellBackendName, input_path: Path, com_available: bool
) -> CellEngine:
    """Select the concrete engine based on the request and environment."""
    extension = input_path.suffix.lower()
    if backend == "openpyxl":
        if extension == ".xls":
            raise ValueError("backend='openpyxl' cannot edit .xls files.")
        return "openpyxl"
    if backend == "com":
        if not com_available:
            raise ValueError("backend='com' requires Windows Excel COM availability.")
        return "com"
    if extension == ".xls":
        if not com_available:
            raise ValueError(
                ".xls editing requires Windows Excel COM (xlwings) in this environment."
            )
        return "com"
    if com_available:
        return "com"
    return "openpyxl"


@contextmanager
def open_cell_backend(
    engine: CellEngine,
    file_path: Path,
    sheet_name: str,
    *,
    auto_formula: bool = False,
) -> Iterator[CellBackend]:
    """Open ``sheet_name`` with the selected engine; saves on clean exit."""
    if engine == "com":
        from .xlwings_backend import open_xlwings_backend

        with open_xlwings_backend(
            file_path, sheet_name, auto_formula=auto_formula
        ) as com_backend:
            yield com_backend
        return
    with open_openpyxl_backend(
        file_path, sheet_name, auto_formula=auto_formula
    ) as openpyxl_backend:
        yield openpyxl_backend
