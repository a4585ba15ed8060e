from __future__ import annotations

from .availability import ComAvailability, get_com_availability, quit_app_safely

__all__ = ["ComAvailability", "get_com_availability", "quit_app_safely"]
