from __future__ import annotations

import string
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

# Coordinates are bounded to the 32-bit unsigned range used by workbook engines.
MAX_INDEX: Final[int] = 0xFFFFFFFF

_ASCII_LETTERS: Final[frozenset[str]] = frozenset(string.ascii_letters)
_ASCII_DIGITS: Final[frozenset[str]] = frozenset(string.digits)


class CellAddress(BaseModel):
    """1-based cell coordinate.

    Instances are immutable and compare by value. A zero row or column is
    never representable; functions that may fail to produce an address
    return ``None`` instead.
    """

    model_config = ConfigDict(frozen=True)

    row: int = Field(..., ge=1, le=MAX_INDEX, description="1-based row index.")
    column: int = Field(..., ge=1, le=MAX_INDEX, description="1-based column index.")

    def to_a1(self) -> str:
        """Return the A1-style reference for this address."""
        return f"{column_index_to_label(self.column)}{self.row}"

    def as_tuple(self) -> tuple[int, int]:
        """Return ``(row, column)``."""
        return self.row, self.column


def encode_address(row: int, column: int) -> str | None:
    """Convert a 1-based (row, column) pair into an A1-style reference.

    Args:
        row: 1-based row index.
        column: 1-based column index.

    Returns:
        Reference such as ``"AB1"``, or None when either index is below 1.
    """
    if row < 1 or column < 1:
        return None
    return f"{column_index_to_label(column)}{row}"


def decode_address(address: str) -> CellAddress | None:
    """Convert an A1-style reference into a cell address.

    The scan is lenient: ASCII letters form the column run, ASCII digits form
    the row run and every other character is dropped, so ``"A 1"`` decodes
    like ``"A1"``.

    Args:
        address: Reference text.

    Returns:
        Decoded address, or None when the letter run or digit run is empty,
        the row is zero, or either index overflows.
    """
    letters: list[str] = []
    digits: list[str] = []
    for char in address:
        if char in _ASCII_LETTERS:
            letters.append(char)
        elif char in _ASCII_DIGITS:
            digits.append(char)
    if not letters or not digits:
        return None
    row = _accumulate_row(digits)
    column = _accumulate_column(letters)
    if column is None or row is None or row < 1:
        return None
    return CellAddress(row=row, column=column)


def _accumulate_row(digits: list[str]) -> int | None:
    """Fold decimal digits into a row index, None on overflow."""
    row = 0
    for char in digits:
        row = row * 10 + (ord(char) - ord("0"))
        if row > MAX_INDEX:
            return None
    return row


def _accumulate_column(letters: list[str]) -> int | None:
    """Fold letters into a bijective base-26 column index, None on overflow."""
    column = 0
    for char in letters:
        column = column * 26 + (ord(char.upper()) - ord("A") + 1)
        if column > MAX_INDEX:
            return None
    return column


def column_label_to_index(label: str) -> int:
    """Convert Excel-style column label (A/AA) to 1-based index."""
    normalized = label.strip().upper()
    if not normalized or any(char not in _ASCII_LETTERS for char in normalized):
        raise ValueError(f"Invalid column label: {label}")
    index = _accumulate_column(list(normalized))
    if index is None:
        raise ValueError(f"Column label out of range: {label}")
    return index


def column_index_to_label(index: int) -> str:
    """Convert 1-based column index to Excel-style column label."""
    if index < 1:
        raise ValueError("Column index must be positive.")
    chunks: list[str] = []
    current = index
    while current > 0:
        # No zero digit: shift to 0-25 before taking the remainder.
        current -= 1
        chunks.append(chr(ord("A") + (current % 26)))
        current //= 26
    return "".join(reversed(chunks))


def format_range(first_row: int, first_column: int, last_row: int, last_column: int) -> str:
    """Format a rectangular block as an A1 range such as ``"B2:D5"``."""
    start = encode_address(first_row, first_column)
    end = encode_address(last_row, last_column)
    if start is None or end is None:
        raise ValueError(
            "Range coordinates must be positive. "
            f"first=({first_row}, {first_column}), last=({last_row}, {last_column})"
        )
    return f"{start}:{end}"
