from __future__ import annotations

from .address import (
    CellAddress,
    column_index_to_label,
    column_label_to_index,
    decode_address,
    encode_address,
    format_range,
)
from .color import BLACK, RGBColor, hex_to_rgb
from .instruction import (
    CellEdit,
    HorizontalAlign,
    InstructionRejected,
    ParseOutcome,
    StyleFlags,
    parse_cell_instruction,
    parse_cell_instructions,
    parse_style_tokens,
)

__all__ = [
    "BLACK",
    "CellAddress",
    "CellEdit",
    "HorizontalAlign",
    "InstructionRejected",
    "ParseOutcome",
    "RGBColor",
    "StyleFlags",
    "column_index_to_label",
    "column_label_to_index",
    "decode_address",
    "encode_address",
    "format_range",
    "hex_to_rgb",
    "parse_cell_instruction",
    "parse_cell_instructions",
    "parse_style_tokens",
]
