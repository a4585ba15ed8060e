from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field

from excelauto.cli.availability import get_com_availability
from excelauto.core import (
    CellEdit,
    InstructionRejected,
    ParseOutcome,
    parse_cell_instructions,
)

from .apply import AppliedCellItem, CellEditError, apply_cell_edit
from .backend import CellBackendName, CellEngine, open_cell_backend, select_cell_engine
from .io import PathPolicy, resolve_existing_workbook
from .workbook import ensure_supported_extension

logger = logging.getLogger(__name__)

_LARGE_BATCH_THRESHOLD = 500


class SkippedInstruction(BaseModel):
    """Instruction that was logged and skipped."""

    index: int
    instruction: str
    reason: ParseOutcome
    message: str


class SetCellsRequest(BaseModel):
    """Input model for applying a batch of cell instructions."""

    xlsx_path: Path
    sheet_name: str = Field(..., min_length=1)
    cells: list[str] = Field(default_factory=list)
    backend: CellBackendName = "auto"
    auto_formula: bool = False


class SetCellsResult(BaseModel):
    """Output model for a cell instruction batch."""

    xlsx_path: str
    sheet_name: str
    applied: list[AppliedCellItem] = Field(default_factory=list)
    skipped: list[SkippedInstruction] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    engine: CellEngine = "openpyxl"


def run_set_cells(
    request: SetCellsRequest, *, policy: PathPolicy | None = None
) -> SetCellsResult:
    """Parse and apply cell instructions, then save the workbook in place.

    Rejected instructions are logged and skipped without aborting the batch.
    A backend failure on an accepted edit aborts the batch before saving.

    Args:
        request: Batch request.
        policy: Optional path policy for access control.

    Returns:
        Applied and skipped instructions in input order.
    """
    resolved = resolve_existing_workbook(request.xlsx_path, policy=policy)
    ensure_supported_extension(resolved)
    com = get_com_availability()
    engine = select_cell_engine(
        backend=request.backend,
        input_path=resolved,
        com_available=com.available,
    )
    warnings: list[str] = []
    if len(request.cells) > _LARGE_BATCH_THRESHOLD:
        warnings.append(
            f"Large batch: {len(request.cells)} instructions. "
            "Consider splitting the request."
        )
    if engine == "openpyxl":
        if com.reason and request.backend == "auto":
            warnings.append(f"COM unavailable: {com.reason}")
        warnings.append(
            "openpyxl editing may drop shapes/charts or unsupported elements."
        )

    edits, skipped = partition_instructions(request.cells)
    for item in skipped:
        warnings.append(item.message)

    applied: list[AppliedCellItem] = []
    with open_cell_backend(
        engine, resolved, request.sheet_name, auto_formula=request.auto_formula
    ) as backend:
        for edit in edits:
            try:
                applied.append(apply_cell_edit(backend, edit))
            except (TypeError, ValueError) as exc:
                raise CellEditError.from_edit(edit, exc) from exc

    logger.info(
        "Applied %d cell instruction(s) to sheet '%s' (%d skipped).",
        len(applied),
        request.sheet_name,
        len(skipped),
    )
    return SetCellsResult(
        xlsx_path=str(resolved),
        sheet_name=request.sheet_name,
        applied=applied,
        skipped=skipped,
        warnings=warnings,
        engine=engine,
    )


def partition_instructions(
    instructions: list[str],
) -> tuple[list[CellEdit], list[SkippedInstruction]]:
    """Split a batch into applicable edits and skipped instructions.

    Both lists keep the relative input order.
    """
    edits: list[CellEdit] = []
    skipped: list[SkippedInstruction] = []
    for result in parse_cell_instructions(instructions):
        logger.info("Instruction #%d: %s", result.index, instructions[result.index])
        if isinstance(result, InstructionRejected):
            logger.warning("Skipping instruction. %s", result.message)
            skipped.append(
                SkippedInstruction(
                    index=result.index,
                    instruction=result.instruction,
                    reason=result.outcome,
                    message=result.message,
                )
            )
            continue
        edits.append(result)
    return edits, skipped
