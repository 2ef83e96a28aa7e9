"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, or SQLAlchemy directly. They serve as stable contracts between
the user store, the token engine and application services.

The translation to HTTP responses (RFC 7807) is handled by
``authcore/core/errors.py`` via ``from_service_error()``.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from stores, the token engine or services.
    - The API layer later translates them to ``APIError``.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class UnauthorizedError(ServiceError):
    """
    Raised for bad credentials and for missing, invalid, expired,
    wrong-purpose or revoked session tokens.

    The message is deliberately generic; callers never learn which check failed.
    """

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class VerificationRequiredError(ServiceError):
    """Raised when valid credentials belong to an account whose email is unverified."""

    def __init__(self, message: str = "Email verification required") -> None:
        super().__init__(message)


class BadRequestError(ServiceError):
    """Raised for malformed input and unusable single-purpose tokens."""

    def __init__(self, message: str = "Bad request") -> None:
        super().__init__(message)


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an account is missing from the user store.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"
