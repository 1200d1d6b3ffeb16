"""
Retry policies.

Each policy is called once per failed attempt with the number of failed
attempts so far and answers whether to fork again.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import timedelta

logger = logging.getLogger(__name__)


def _pause(seconds: float) -> None:
    if seconds > 0:
        logger.debug("Waiting %.3fs before next fork attempt", seconds)
        time.sleep(seconds)


@dataclass(frozen=True, slots=True)
class NeverPolicy:
    """Do not retry. A single failure goes straight to the error clause."""

    def __call__(self, attempts: int) -> bool:
        return False

def never() -> NeverPolicy:
    """No retries (the default)."""
    return NeverPolicy()


@dataclass(frozen=True, slots=True)
class AttemptsPolicy:
    """Fork at most `limit` times in total, waiting `delay` between tries."""
    limit: int
    delay: timedelta

    def __call__(self, attempts: int) -> bool:
        if attempts >= self.limit:
            return False
        _pause(self.delay.total_seconds())
        return True

def attempts(limit: int, delay: timedelta = timedelta(0)) -> AttemptsPolicy:
    """
    Bounded retry budget.

    Example:
        F.child(work).retry(F.policy.retry.attempts(5, delay=timedelta(seconds=1))).run()
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    if delay < timedelta(0):
        raise ValueError("delay must not be negative")
    return AttemptsPolicy(limit, delay)


@dataclass(frozen=True, slots=True)
class ForeverPolicy:
    """Keep trying until the primitive succeeds."""
    delay: timedelta

    def __call__(self, attempts: int) -> bool:
        _pause(self.delay.total_seconds())
        return True

def forever(delay: timedelta = timedelta(0)) -> ForeverPolicy:
    """Retry without limit."""
    if delay < timedelta(0):
        raise ValueError("delay must not be negative")
    return ForeverPolicy(delay)


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    """
    Bounded retry budget with exponentially growing waits (seconds).

    Wait before retry n is min(maximum, initial * factor ** (n - 1)).
    """
    limit: int
    initial: float = 0.1
    factor: float = 2.0
    maximum: float = 2.0

    def wait_for(self, attempts: int) -> float:
        return min(self.maximum, self.initial * self.factor ** (attempts - 1))

    def __call__(self, attempts: int) -> bool:
        if attempts >= self.limit:
            return False
        _pause(self.wait_for(attempts))
        return True

def backoff(
    limit: int,
    initial: float = 0.1,
    factor: float = 2.0,
    maximum: float = 2.0,
) -> BackoffPolicy:
    """
    Retry with exponential backoff.

    Example:
        F.retry(F.policy.retry.backoff(6, initial=0.5, maximum=8.0), chain)
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    if initial < 0 or maximum < 0:
        raise ValueError("waits must not be negative")
    if factor < 1:
        raise ValueError("factor must be at least 1")
    return BackoffPolicy(limit, initial, factor, maximum)


__all__ = (
    "NeverPolicy",
    "never",
    "AttemptsPolicy",
    "attempts",
    "ForeverPolicy",
    "forever",
    "BackoffPolicy",
    "backoff",
)
