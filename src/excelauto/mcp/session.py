from __future__ import annotations

import logging
from pathlib import Path
import threading

logger = logging.getLogger(__name__)


class WorkbookSession:
    """Holds the workbook that tool calls operate on.

    ``open_excel_and_list_sheets`` and ``create_xlsx_file_by_absolute_path``
    select the current workbook; every other tool reads it from here.
    """

    def __init__(self, current_path: Path | None = None) -> None:
        self._lock = threading.Lock()
        self._current_path = current_path

    @property
    def current_path(self) -> Path | None:
        """Currently selected workbook path, if any."""
        with self._lock:
            return self._current_path

    def select(self, path: Path) -> None:
        """Make ``path`` the current workbook."""
        with self._lock:
            self._current_path = path
        logger.info("Current workbook: %s", path)

    def require_current(self) -> Path:
        """Return the current workbook path.

        Raises:
            ValueError: If no workbook has been opened or created yet.
        """
        path = self.current_path
        if path is None:
            raise ValueError(
                "No Excel file is open. Call open_excel_and_list_sheets or "
                "create_xlsx_file_by_absolute_path first."
            )
        return path
