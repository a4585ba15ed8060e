"""ExcelAuto: A1 address codec and cell instruction interpreter for Excel workbooks."""

from __future__ import annotations

from .core import (
    CellAddress,
    CellEdit,
    InstructionRejected,
    ParseOutcome,
    RGBColor,
    StyleFlags,
    decode_address,
    encode_address,
    hex_to_rgb,
    parse_cell_instruction,
    parse_cell_instructions,
)

__version__ = "0.1.0"

__all__ = [
    "CellAddress",
    "CellEdit",
    "InstructionRejected",
    "ParseOutcome",
    "RGBColor",
    "StyleFlags",
    "__version__",
    "decode_address",
    "encode_address",
    "hex_to_rgb",
    "parse_cell_instruction",
    "parse_cell_instructions",
]
