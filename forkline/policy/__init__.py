"""
Built-in fork block policies.

Namespace: F.policy.*

Examples:
    F.child(work).retry(F.policy.retry.attempts(5)).run()
    F.child(work).error(F.policy.error.raise_()).run()
"""

from __future__ import annotations

from forkline.policy._retry import (
    never,
    attempts,
    forever,
    backoff,
)
from forkline.policy._error import exit_, raise_, ignore


# Namespace objects
class retry:
    """Retry policies."""

    never = staticmethod(never)
    attempts = staticmethod(attempts)
    forever = staticmethod(forever)
    backoff = staticmethod(backoff)


class error:
    """Error policies."""

    exit = staticmethod(exit_)
    raise_ = staticmethod(raise_)
    ignore = staticmethod(ignore)


__all__ = (
    "retry",
    "error",
)
