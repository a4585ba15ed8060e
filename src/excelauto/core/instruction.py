"""Cell instruction mini-language.

An instruction describes one cell edit in a single string::

    'Total'@B3#B$FF0000%00FF00

``'...'`` is the optional content, ``@`` introduces the mandatory address,
``#`` the style tokens, ``$`` the foreground color and ``%`` the background
color. Parsing never raises; unusable instructions are returned as
:class:`InstructionRejected` values so a batch can skip them and continue.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final, Literal

from pydantic import BaseModel, ConfigDict, Field

from .address import CellAddress, decode_address
from .color import RGBColor, hex_to_rgb

HorizontalAlign = Literal["left", "center", "right"]
ParseOutcome = Literal["missing_address", "invalid_address"]
StyleAttribute = Literal["alignment", "bold", "italic", "underline"]

CONTENT_QUOTE: Final[str] = "'"
ADDRESS_ANCHOR: Final[str] = "@"
STYLE_ANCHOR: Final[str] = "#"
FOREGROUND_ANCHOR: Final[str] = "$"
BACKGROUND_ANCHOR: Final[str] = "%"

# Field order after the address anchor. A field ends at the nearest anchor
# that is later in this order and positioned after it.
_FIELD_ANCHORS: Final[tuple[str, ...]] = (
    ADDRESS_ANCHOR,
    STYLE_ANCHOR,
    FOREGROUND_ANCHOR,
    BACKGROUND_ANCHOR,
)
_TAIL_ANCHORS: Final[frozenset[str]] = frozenset(_FIELD_ANCHORS[1:])

ALIGN_RIGHT_GLYPH: Final[str] = "➡"
ALIGN_LEFT_GLYPH: Final[str] = "⬅"
ALIGN_CENTER_GLYPH: Final[str] = "↔"

# Checked in this order; when contradictory tokens are present the later
# entry wins (center over left over right, disable over enable).
STYLE_TOKEN_ORDER: Final[
    tuple[tuple[str, StyleAttribute, HorizontalAlign | bool], ...]
] = (
    (ALIGN_RIGHT_GLYPH, "alignment", "right"),
    (ALIGN_LEFT_GLYPH, "alignment", "left"),
    (ALIGN_CENTER_GLYPH, "alignment", "center"),
    ("B", "bold", True),
    ("b", "bold", False),
    ("I", "italic", True),
    ("i", "italic", False),
    ("U", "underline", True),
    ("u", "underline", False),
)

_ContentState = Literal["before", "open", "closed"]


class StyleFlags(BaseModel):
    """Requested style overrides; None leaves the attribute untouched."""

    model_config = ConfigDict(frozen=True)

    alignment: HorizontalAlign | None = None
    bold: bool | None = None
    italic: bool | None = None
    underline: bool | None = None

    @property
    def is_empty(self) -> bool:
        """Return True when no attribute is overridden."""
        return (
            self.alignment is None
            and self.bold is None
            and self.italic is None
            and self.underline is None
        )


class CellEdit(BaseModel):
    """Parsed edit for a single cell."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(default=0, ge=0, description="Position in the batch.")
    address: CellAddress
    content: str | None = Field(
        default=None,
        description="Text to write. None means no content field was given.",
    )
    style: StyleFlags = Field(default_factory=StyleFlags)
    foreground: RGBColor | None = None
    background: RGBColor | None = None

    @property
    def cell(self) -> str:
        """A1 reference of the target cell."""
        return self.address.to_a1()


class InstructionRejected(BaseModel):
    """Instruction that cannot be applied and must be skipped."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(default=0, ge=0)
    instruction: str
    outcome: ParseOutcome
    address_text: str | None = None

    @property
    def message(self) -> str:
        """Human-readable reason for the rejection."""
        if self.outcome == "missing_address":
            return (
                f"Instruction #{self.index} has no '@' address marker: "
                f"{self.instruction!r}"
            )
        return (
            f"Instruction #{self.index} has an invalid cell address "
            f"{self.address_text!r}: {self.instruction!r}"
        )


class _AnchorScan(BaseModel):
    """Anchor positions recorded by a single pass over an instruction."""

    content: str | None = None
    address_anchor: int | None = None
    tail_anchors: dict[str, int] = Field(default_factory=dict)


def parse_cell_instruction(
    instruction: str, *, index: int = 0
) -> CellEdit | InstructionRejected:
    """Parse one instruction string.

    Args:
        instruction: Instruction text.
        index: Position of the instruction in its batch.

    Returns:
        The parsed edit, or a rejection when the address marker is missing
        or the address does not decode.
    """
    scan = _scan_anchors(instruction)
    if scan.address_anchor is None:
        return InstructionRejected(
            index=index, instruction=instruction, outcome="missing_address"
        )
    address_text = _field_text(instruction, scan, ADDRESS_ANCHOR)
    address = decode_address(address_text or "")
    if address is None:
        return InstructionRejected(
            index=index,
            instruction=instruction,
            outcome="invalid_address",
            address_text=address_text,
        )
    style_text = _field_text(instruction, scan, STYLE_ANCHOR)
    return CellEdit(
        index=index,
        address=address,
        content=scan.content,
        style=parse_style_tokens(style_text or ""),
        foreground=_decode_color(_field_text(instruction, scan, FOREGROUND_ANCHOR)),
        background=_decode_color(_field_text(instruction, scan, BACKGROUND_ANCHOR)),
    )


def parse_cell_instructions(
    instructions: Iterable[str],
) -> list[CellEdit | InstructionRejected]:
    """Parse a batch of instructions, one result per input in input order."""
    return [
        parse_cell_instruction(instruction, index=index)
        for index, instruction in enumerate(instructions)
    ]


def parse_style_tokens(style: str) -> StyleFlags:
    """Decode style tokens into flags.

    Tokens are matched by presence, so their order inside the field does not
    matter and repeats are idempotent. Unknown characters are ignored.
    """
    present = set(style)
    updates: dict[str, HorizontalAlign | bool] = {}
    for token, attribute, value in STYLE_TOKEN_ORDER:
        if token in present:
            updates[attribute] = value
    return StyleFlags.model_validate(updates)


def _scan_anchors(instruction: str) -> _AnchorScan:
    """Locate the content field and the field anchors in one pass.

    The first quote opens the content and the next one closes it; an unclosed
    quote leaves the content absent. The first ``@`` anywhere is the address
    anchor, and style and color anchors are only recorded after it.
    """
    content_state: _ContentState = "before"
    content_start = 0
    scan = _AnchorScan()
    for pos, char in enumerate(instruction):
        if char == CONTENT_QUOTE:
            if content_state == "before":
                content_start = pos + 1
                content_state = "open"
            elif content_state == "open":
                scan.content = instruction[content_start:pos]
                content_state = "closed"
        if scan.address_anchor is None:
            if char == ADDRESS_ANCHOR:
                scan.address_anchor = pos
        elif char in _TAIL_ANCHORS:
            scan.tail_anchors.setdefault(char, pos)
    return scan


def _field_text(instruction: str, scan: _AnchorScan, anchor: str) -> str | None:
    """Return the text of the field introduced by ``anchor``, or None."""
    if anchor == ADDRESS_ANCHOR:
        start = scan.address_anchor
    else:
        start = scan.tail_anchors.get(anchor)
    if start is None:
        return None
    end = len(instruction)
    order = _FIELD_ANCHORS.index(anchor)
    for later in _FIELD_ANCHORS[order + 1 :]:
        position = scan.tail_anchors.get(later)
        if position is not None and start < position < end:
            end = position
    return instruction[start + 1 : end]


def _decode_color(text: str | None) -> RGBColor | None:
    """Decode an optional color field; an empty field counts as absent."""
    if not text:
        return None
    return hex_to_rgb(text)
