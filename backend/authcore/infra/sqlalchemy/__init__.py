from __future__ import annotations

from .user_store import SqlAlchemyUserStore

__all__ = ["SqlAlchemyUserStore"]
