"""Session lifecycle and revocation."""

from __future__ import annotations

from .revocation import RevocationLedger
from .service import SessionManager

__all__ = ["RevocationLedger", "SessionManager"]
