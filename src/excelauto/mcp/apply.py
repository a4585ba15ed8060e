from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from excelauto.core import CellEdit

from .backend.base import CellBackend

AppliedField = Literal[
    "content",
    "alignment",
    "bold",
    "italic",
    "underline",
    "foreground",
    "background",
]


class AppliedCellItem(BaseModel):
    """Record of the writes performed for one instruction."""

    index: int
    cell: str
    fields: list[AppliedField] = Field(default_factory=list)


class CellEditErrorDetail(BaseModel):
    """Structured details for a failed cell edit."""

    index: int
    cell: str
    message: str


class CellEditError(ValueError):
    """Backend failure while applying a parsed cell edit."""

    def __init__(self, detail: CellEditErrorDetail) -> None:
        super().__init__(detail.message)
        self.detail = detail

    @classmethod
    def from_edit(cls, edit: CellEdit, exc: Exception) -> CellEditError:
        """Build a CellEditError from an edit and the underlying exception."""
        return cls(
            CellEditErrorDetail(
                index=edit.index,
                cell=edit.cell,
                message=f"Failed to apply instruction #{edit.index} to {edit.cell}: {exc}",
            )
        )


def apply_cell_edit(backend: CellBackend, edit: CellEdit) -> AppliedCellItem:
    """Apply one parsed edit to a backend.

    Writes happen in a fixed order: content, alignment, bold, italic,
    underline, foreground, background. Attributes the instruction did not
    mention are not written.

    Args:
        backend: Target cell backend.
        edit: Parsed cell edit.

    Returns:
        The fields that were written.
    """
    row, column = edit.address.as_tuple()
    fields: list[AppliedField] = []
    if edit.content is not None:
        backend.set_cell_text(row, column, edit.content)
        fields.append("content")
    style = edit.style
    if style.alignment is not None:
        backend.set_cell_alignment(row, column, style.alignment, None)
        fields.append("alignment")
    if style.bold is not None:
        backend.set_cell_bold(row, column, style.bold)
        fields.append("bold")
    if style.italic is not None:
        backend.set_cell_italic(row, column, style.italic)
        fields.append("italic")
    if style.underline is not None:
        backend.set_cell_underline(row, column, style.underline)
        fields.append("underline")
    if edit.foreground is not None:
        backend.set_cell_font_color(row, column, edit.foreground)
        fields.append("foreground")
    if edit.background is not None:
        backend.set_cell_background_color(row, column, edit.background)
        fields.append("background")
    return AppliedCellItem(index=edit.index, cell=edit.cell, fields=fields)
