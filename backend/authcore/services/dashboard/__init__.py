from __future__ import annotations

from .service import DashboardService

__all__ = ["DashboardService"]
