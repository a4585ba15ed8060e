from __future__ import annotations

from pathlib import Path
from typing import Literal

OnConflictPolicy = Literal["overwrite", "skip", "rename"]


def apply_conflict_policy(
    output_path: Path, on_conflict: OnConflictPolicy
) -> tuple[Path, str | None, bool]:
    """Apply the conflict policy to a workbook that is about to be created.

    Returns:
        Target path, optional warning, and whether the write must be skipped.
    """
    if not output_path.exists():
        return output_path, None, False
    if on_conflict == "skip":
        return (
            output_path,
            f"Workbook exists; keeping existing file: {output_path.name}",
            True,
        )
    if on_conflict == "rename":
        renamed = next_available_path(output_path)
        return (
            renamed,
            f"Workbook exists; created as: {renamed.name}",
            False,
        )
    return output_path, f"Workbook exists; overwriting: {output_path.name}", False


def next_available_path(path: Path) -> Path:
    """Return the next available path by appending a numeric suffix."""
    if not path.exists():
        return path
    stem = path.stem
    suffix = path.suffix
    for idx in range(1, 10_000):
        candidate = path.with_name(f"{stem}_{idx}{suffix}")
        if not candidate.exists():
            return candidate
    raise RuntimeError(f"Failed to resolve unique path for {path}")


def ensure_output_dir(path: Path) -> None:
    """Ensure the parent directory exists before writing."""
    path.parent.mkdir(parents=True, exist_ok=True)
