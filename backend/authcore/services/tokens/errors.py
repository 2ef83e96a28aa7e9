"""Token verification failures."""

from __future__ import annotations


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpiredError(TokenError):
    """The token was well-formed and authentic but presented at or after ``exp``."""


class TokenInvalidError(TokenError):
    """Bad structure, bad signature, wrong audience/purpose or missing claims."""
