"""
Dispatcher — fork once, route once.

    attempt()  one call of the primitive, as a Result
    resolve()  retry loop until success or the retry policy gives up
    route()    hand the outcome to exactly one handler
    activate() all of the above for an open clause set, exactly once
"""

from __future__ import annotations

import logging

from kungfu import Ok, Error

from forkline._clauses import ChainState, ClauseSet, continue_chain
from forkline._types import (
    Attempt,
    Forker,
    Outcome,
    Parent,
    Child,
    Failed,
)

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# attempt() — Single Call
# ═══════════════════════════════════════════════════════════════════════════════


def attempt(forker: Forker) -> Attempt:
    """Call the primitive once. OSError becomes Error, anything else propagates."""
    try:
        return Ok(forker())
    except OSError as e:
        return Error(e)


# ═══════════════════════════════════════════════════════════════════════════════
# resolve() — Retry Loop
# ═══════════════════════════════════════════════════════════════════════════════


def resolve(clauses: ClauseSet) -> Outcome:
    """
    Fork until it works or the retry policy says stop.

    The retry policy sees 1 after the first failure, 2 after the second,
    and so on. It is never consulted after a success.
    """
    forker = clauses.config.forker
    failures = 0

    while True:
        match attempt(forker):
            case Ok(pid):
                if pid == 0:
                    return Child()
                logger.debug("Forked child %d after %d failed attempt(s)", pid, failures)
                return Parent(pid)
            case Error(e):
                failures += 1
                logger.debug("Fork attempt %d failed: %s", failures, e)
                if not clauses.retry_policy(failures):
                    return Failed(failures, e)


# ═══════════════════════════════════════════════════════════════════════════════
# route() — Dispatch
# ═══════════════════════════════════════════════════════════════════════════════


def route(clauses: ClauseSet, outcome: Outcome) -> None:
    """Invoke the one handler that matches the outcome."""
    match outcome:
        case Parent(child_id):
            clauses.parent_handler(child_id)
        case Child():
            clauses.child_handler()
        case Failed(attempts, error):
            # The OS error is the active exception inside the error handler.
            try:
                raise error
            except OSError:
                clauses.error_handler(attempts)


# ═══════════════════════════════════════════════════════════════════════════════
# activate() — Entry Point
# ═══════════════════════════════════════════════════════════════════════════════


def activate(clauses: ClauseSet) -> None:
    """
    Fork and dispatch an open clause set.

    The set is consumed before the first attempt, so a handler that tries
    to run it again gets MalformedChain instead of a second fork.

    Handler exceptions and SystemExit propagate unchanged. A handler that
    returns normally lets execution continue after the fork block, in
    whichever process it ran.
    """
    clauses = continue_chain(clauses)
    clauses.state = ChainState.DISPATCHED
    route(clauses, resolve(clauses))


__all__ = ("attempt", "resolve", "route", "activate")
