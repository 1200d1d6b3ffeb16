"""
Core types for forkline.

Re-exports from kungfu + outcome tokens and handler aliases.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

# Re-export from kungfu
from kungfu import Result, Ok, Error

# ═══════════════════════════════════════════════════════════════════════════════
# Clause — Named Roles in a Fork Block
# ═══════════════════════════════════════════════════════════════════════════════


class Clause(Enum):
    """The four roles a handler can fill."""

    PARENT = "parent"
    CHILD = "child"
    RETRY = "retry"
    ERROR = "error"


# ═══════════════════════════════════════════════════════════════════════════════
# Handler Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type ParentHandler = Callable[[int], object]
"""Runs in the parent. Receives the child's pid."""

type ChildHandler = Callable[[], object]
"""Runs in the child."""

type RetryHandler = Callable[[int], bool]
"""Receives the number of failed attempts so far. True → fork again."""

type ErrorHandler = Callable[[int], object]
"""Receives the number of attempts made, all of which failed."""

type Forker = Callable[[], int]
"""Duplication primitive: pid in the parent, 0 in the child, OSError on failure."""

type Attempt = Result[int, OSError]
"""Raw result of a single call to the primitive."""

# ═══════════════════════════════════════════════════════════════════════════════
# Outcome — What One Fork Block Resolved To
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Parent:
    """This execution is the parent."""

    child_id: int


@dataclass(frozen=True, slots=True)
class Child:
    """This execution is the duplicated process."""


@dataclass(frozen=True, slots=True)
class Failed:
    """
    Every attempt failed and the retry policy gave up.

    error is the OSError raised by the last attempt.
    """

    attempts: int
    error: OSError


type Outcome = Parent | Child | Failed

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    # Clauses & handlers
    "Clause",
    "ParentHandler",
    "ChildHandler",
    "RetryHandler",
    "ErrorHandler",
    "Forker",
    "Attempt",
    # Outcome
    "Parent",
    "Child",
    "Failed",
    "Outcome",
)
