from __future__ import annotations

from .werkzeug_password_hasher import WerkzeugPasswordHasher

__all__ = ["WerkzeugPasswordHasher"]
