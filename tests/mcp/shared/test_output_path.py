from __future__ import annotations

from pathlib import Path

from excelauto.mcp.shared.output_path import (
    apply_conflict_policy,
    ensure_output_dir,
    next_available_path,
)


def test_apply_conflict_policy_no_conflict(tmp_path: Path) -> None:
    target = tmp_path / "book.xlsx"
    assert apply_conflict_policy(target, "skip") == (target, None, False)


def test_apply_conflict_policy_rename(tmp_path: Path) -> None:
    target = tmp_path / "book.xlsx"
    target.write_bytes(b"x")
    resolved, warning, skipped = apply_conflict_policy(target, "rename")
    assert resolved.name == "book_1.xlsx"
    assert warning == "Workbook exists; created as: book_1.xlsx"
    assert skipped is False


def test_apply_conflict_policy_skip(tmp_path: Path) -> None:
    target = tmp_path / "book.xlsx"
    target.write_bytes(b"x")
    resolved, warning, skipped = apply_conflict_policy(target, "skip")
    assert resolved == target
    assert warning == "Workbook exists; keeping existing file: book.xlsx"
    assert skipped is True


def test_apply_conflict_policy_overwrite(tmp_path: Path) -> None:
    target = tmp_path / "book.xlsx"
    target.write_bytes(b"x")
    resolved, warning, skipped = apply_conflict_policy(target, "overwrite")
    assert resolved == target
    assert warning == "Workbook exists; overwriting: book.xlsx"
    assert skipped is False


def test_next_available_path_no_conflict(tmp_path: Path) -> None:
    target = tmp_path / "book.xlsx"
    assert next_available_path(target) == target


def test_next_available_path_skips_taken_names(tmp_path: Path) -> None:
    target = tmp_path / "book.xlsx"
    target.write_bytes(b"x")
    (tmp_path / "book_1.xlsx").write_bytes(b"x")
    assert next_available_path(target).name == "book_2.xlsx"


def test_ensure_output_dir(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "book.xlsx"
    ensure_output_dir(target)
    assert target.parent.is_dir()
