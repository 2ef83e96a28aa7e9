"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`authcore.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``authcore.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Shared DTOs (from ``authcore.services._shared.dto``)
    * :class:`AccountOut`
    * :class:`PageMeta`

- Session engine (from ``authcore.services.auth``)
    * :class:`SessionManager`, :class:`RevocationLedger`

- Profile and dashboard services
    * :class:`IdentityService`, :class:`DashboardService`
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from ._shared.dto import AccountOut, PageMeta
from .auth import RevocationLedger, SessionManager
from .dashboard import DashboardService
from .identity import IdentityService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Shared DTOs
    "AccountOut",
    "PageMeta",
    # Session engine
    "RevocationLedger",
    "SessionManager",
    # Application services
    "DashboardService",
    "IdentityService",
]
