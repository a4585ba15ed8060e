from __future__ import annotations

from .base import CellBackend
from .selection import open_cell_backend, select_cell_engine
from .types import CellBackendName, CellEngine, VerticalAlign

__all__ = [
    "CellBackend",
    "CellBackendName",
    "CellEngine",
    "VerticalAlign",
    "open_cell_backend",
    "select_cell_engine",
]
