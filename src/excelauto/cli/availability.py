from __future__ import annotations

import importlib
import os
import sys
from typing import Any

from pydantic import BaseModel


class ComAvailability(BaseModel):
    """Whether Excel COM automation can be used in this process."""

    available: bool
    reason: str | None = None


def get_com_availability() -> ComAvailability:
    """Detect Excel COM availability.

    Returns:
        Availability flag with a reason when unavailable.
    """
    if os.getenv("SKIP_COM_TESTS") == "1":
        return ComAvailability(available=False, reason="SKIP_COM_TESTS is set.")
    if sys.platform != "win32":
        return ComAvailability(
            available=False, reason="Excel COM requires Windows."
        )
    try:
        xw = importlib.import_module("xlwings")
    except ImportError as exc:
        return ComAvailability(available=False, reason=f"xlwings import failed: {exc}")
    try:
        app = xw.App(add_book=False, visible=False)
    except Exception as exc:
        return ComAvailability(
            available=False, reason=f"Excel application is unavailable: {exc}"
        )
    quit_app_safely(app)
    return ComAvailability(available=True)


def quit_app_safely(app: Any) -> None:
    """Quit xlwings app and fallback to force-kill on failure."""
    try:
        app.quit()
    except Exception:
        try:
            app.kill()
        except Exception:
            return
