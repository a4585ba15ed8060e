from __future__ import annotations

from typing import Literal

CellBackendName = Literal["auto", "com", "openpyxl"]
CellEngine = Literal["com", "openpyxl"]
VerticalAlign = Literal["top", "center", "bottom"]
