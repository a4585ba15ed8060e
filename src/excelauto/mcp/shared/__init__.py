from __future__ import annotations

from .output_path import (
    OnConflictPolicy,
    apply_conflict_policy,
    ensure_output_dir,
    next_available_path,
)

__all__ = [
    "OnConflictPolicy",
    "apply_conflict_policy",
    "ensure_output_dir",
    "next_available_path",
]
