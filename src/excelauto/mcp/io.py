from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class PathPolicy(BaseModel):
    """Filesystem access policy for MCP requests."""

    root: Path | None = Field(
        default=None,
        description="Root directory for allowed access. None allows any absolute path.",
    )
    deny_globs: list[str] = Field(
        default_factory=list, description="Glob patterns to deny."
    )

    def normalize_root(self) -> Path | None:
        """Return the resolved root path, if any."""
        return self.root.resolve() if self.root is not None else None

    def ensure_allowed(self, path: Path) -> Path:
        """Validate a workbook path against the policy.

        Args:
            path: Candidate path to validate.

        Returns:
            Resolved path if allowed.

        Raises:
            ValueError: If the path is relative without a root, outside the
                root, or denied by glob.
        """
        root = self.normalize_root()
        if root is None:
            if not path.is_absolute():
                raise ValueError(
                    f"Path must be absolute: {path}. "
                    "Start the server with --root to allow relative paths."
                )
            resolved = path.resolve()
        else:
            candidate = path if path.is_absolute() else root / path
            resolved = candidate.resolve()
            if resolved != root and root not in resolved.parents:
                raise ValueError(
                    "Path is outside root. "
                    f"resolved={resolved}, root={root}, "
                    "example_relative='reports/book.xlsx'."
                )
        if self._is_denied(resolved, root):
            raise ValueError(f"Path is denied by policy: {resolved}")
        return resolved

    def _is_denied(self, path: Path, root: Path | None) -> bool:
        """Check if a path is denied by glob rules.

        Args:
            path: Resolved candidate path.
            root: Resolved root path, if any.

        Returns:
            True if denied, False otherwise.
        """
        rel = path.relative_to(root) if root is not None else None
        for pattern in self.deny_globs:
            if path.match(pattern) or (rel is not None and rel.match(pattern)):
                return True
        return False


def resolve_path(path: Path, *, policy: PathPolicy | None) -> Path:
    """Resolve a path through the policy when one is configured."""
    return policy.ensure_allowed(path) if policy else path.resolve()


def resolve_existing_workbook(path: Path, *, policy: PathPolicy | None) -> Path:
    """Resolve a workbook path that must already exist."""
    resolved = resolve_path(path, policy=policy)
    if not resolved.exists():
        raise FileNotFoundError(f"Workbook not found: {resolved}")
    if not resolved.is_file():
        raise ValueError(f"Workbook path is not a file: {resolved}")
    return resolved
