from __future__ import annotations

from .dto import ProfileUpdateIn
from .service import IdentityService

__all__ = ["IdentityService", "ProfileUpdateIn"]
