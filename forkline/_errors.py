"""
forkline exception hierarchy.

All forkline exceptions inherit from ForkError.
"""

from __future__ import annotations

import os

from forkline._types import Clause


class ForkError(Exception):
    """Base exception for all forkline errors."""


class MalformedChain(ForkError, TypeError):
    """
    Raised when a declaration receives something that is not a live chain.

    Covers foreign values, clause sets that were already dispatched or
    abandoned, and handlers that are not callable.
    """


class DuplicateClause(ForkError, ValueError):
    """Raised when the same clause is declared twice in one chain."""

    def __init__(self, clause: Clause) -> None:
        self.clause = clause
        super().__init__(f"{clause.value} clause declared twice in one fork block")


class DuplicationFailure(ForkError):
    """
    The duplication primitive failed and the retry policy gave up.

    Only raised by error handlers that ask for it (policy.error.raise_()).
    """

    def __init__(self, attempts: int, error: OSError | None = None) -> None:
        self.attempts = attempts
        self.error = error
        super().__init__(f"Cannot fork: {describe(error)}")


def describe(error: OSError | None) -> str:
    """Platform text for a failed fork, e.g. 'Resource temporarily unavailable'."""
    if error is None:
        return "unknown error"
    if error.strerror:
        return error.strerror
    if error.errno is not None:
        return os.strerror(error.errno)
    return str(error) or type(error).__name__


__all__ = (
    "ForkError",
    "MalformedChain",
    "DuplicateClause",
    "DuplicationFailure",
    "describe",
)
