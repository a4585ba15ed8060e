"""MCP server integration for ExcelAuto."""

from __future__ import annotations

from .cell_runner import SetCellsRequest, SetCellsResult, run_set_cells
from .io import PathPolicy
from .session import WorkbookSession
from .tools import SetCellsToolInput, SetCellsToolOutput, run_set_cells_tool

__all__ = [
    "PathPolicy",
    "SetCellsRequest",
    "SetCellsResult",
    "SetCellsToolInput",
    "SetCellsToolOutput",
    "WorkbookSession",
    "run_set_cells",
    "run_set_cells_tool",
]
