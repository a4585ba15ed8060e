from __future__ import annotations

from pathlib import Path

import pytest

from excelauto.mcp.io import PathPolicy, resolve_existing_workbook, resolve_path


def test_policy_without_root_requires_absolute_path() -> None:
    policy = PathPolicy()
    with pytest.raises(ValueError, match="Path must be absolute"):
        policy.ensure_allowed(Path("relative/book.xlsx"))


def test_policy_without_root_allows_absolute_path(tmp_path: Path) -> None:
    policy = PathPolicy()
    target = tmp_path / "book.xlsx"
    assert policy.ensure_allowed(target) == target.resolve()


def test_policy_with_root_resolves_relative_path(tmp_path: Path) -> None:
    policy = PathPolicy(root=tmp_path)
    assert policy.ensure_allowed(Path("reports/book.xlsx")) == (
        tmp_path.resolve() / "reports" / "book.xlsx"
    )


def test_policy_rejects_escape_from_root(tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()
    policy = PathPolicy(root=root)
    with pytest.raises(ValueError, match="Path is outside root"):
        policy.ensure_allowed(Path("../other.xlsx"))


def test_policy_deny_glob(tmp_path: Path) -> None:
    policy = PathPolicy(root=tmp_path, deny_globs=["**/*.secret.xlsx"])
    with pytest.raises(ValueError, match="denied by policy"):
        policy.ensure_allowed(Path("a/b.secret.xlsx"))


def test_policy_deny_glob_without_root(tmp_path: Path) -> None:
    policy = PathPolicy(deny_globs=["*.xlsm"])
    with pytest.raises(ValueError, match="denied by policy"):
        policy.ensure_allowed(tmp_path / "macro.xlsm")


def test_resolve_path_without_policy(tmp_path: Path) -> None:
    target = tmp_path / "x.xlsx"
    assert resolve_path(target, policy=None) == target.resolve()


def test_resolve_existing_workbook(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Workbook not found"):
        resolve_existing_workbook(tmp_path / "missing.xlsx", policy=None)
    with pytest.raises(ValueError, match="not a file"):
        resolve_existing_workbook(tmp_path, policy=None)
    target = tmp_path / "book.xlsx"
    target.write_bytes(b"")
    assert resolve_existing_workbook(target, policy=None) == target.resolve()
