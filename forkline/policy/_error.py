"""
Error policies.

Error handlers run while the OSError from the last attempt is the active
exception, so sys.exception() returns it.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

from forkline._errors import DuplicationFailure, describe

logger = logging.getLogger(__name__)


def _active_error() -> OSError | None:
    error = sys.exception()
    return error if isinstance(error, OSError) else None


@dataclass(frozen=True, slots=True)
class ExitPolicy:
    """Terminate the process with a diagnostic naming the OS error."""
    status: int = 1

    def __call__(self, attempts: int) -> None:
        message = f"Cannot fork: {describe(_active_error())}"
        logger.debug("%s (gave up after %d attempt(s))", message, attempts)
        if self.status == 1:
            raise SystemExit(message)
        print(message, file=sys.stderr)
        raise SystemExit(self.status)

def exit_(status: int = 1) -> ExitPolicy:
    """Die loudly (the default). status must signal failure, so 0 is rejected."""
    if status == 0:
        raise ValueError("status must be non-zero")
    return ExitPolicy(status)


@dataclass(frozen=True, slots=True)
class RaisePolicy:
    """Raise DuplicationFailure to the code around the fork block."""

    def __call__(self, attempts: int) -> None:
        error = _active_error()
        raise DuplicationFailure(attempts, error) from error

def raise_() -> RaisePolicy:
    """
    Turn a fork failure into an exception.

    Example:
        try:
            F.child(work).error(F.policy.error.raise_()).run()
        except F.DuplicationFailure as e:
            ...
    """
    return RaisePolicy()


@dataclass(frozen=True, slots=True)
class IgnorePolicy:
    """Log the failure and carry on after the fork block."""

    def __call__(self, attempts: int) -> None:
        logger.warning(
            "Cannot fork: %s (gave up after %d attempt(s)), continuing",
            describe(_active_error()),
            attempts,
        )

def ignore() -> IgnorePolicy:
    """Best-effort: no child, no fuss."""
    return IgnorePolicy()


__all__ = (
    "ExitPolicy",
    "exit_",
    "RaisePolicy",
    "raise_",
    "IgnorePolicy",
    "ignore",
)
