"""
Transaction boundary used by the account services.

A unit of work wraps one store call: it exposes the ``users`` repository
bound to its session and either commits everything or nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authcore.repositories import UserRepository


class UnitOfWork(ABC):
    """
    Context manager around one account transaction.

    Leaving the block without an exception commits; an exception rolls back
    and propagates. Read-only variants refuse to commit.
    """

    users: UserRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
