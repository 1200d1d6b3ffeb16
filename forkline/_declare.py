"""
Declaration API — the four clauses as plain functions.

Each call either starts a fork block or adds to the one passed as `chain`:

    F.child(work, F.parent(track)).run()

Nothing forks until the chain ends with .run() (or F.activate), or the
with-block managing it exits. A chain dropped while still open never
forks; collecting it emits a ResourceWarning.
"""

from __future__ import annotations

from forkline._clauses import ClauseSet, new_chain, continue_chain
from forkline._config import Config
from forkline._types import (
    Clause,
    ParentHandler,
    ChildHandler,
    RetryHandler,
    ErrorHandler,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Shared Plumbing
# ═══════════════════════════════════════════════════════════════════════════════


def _configure(
    clause: Clause,
    handler: object,
    chain: ClauseSet | None,
    config: Config | None,
) -> ClauseSet:
    if chain is None:
        clauses = new_chain(config)
    else:
        clauses = continue_chain(chain)
        if config is not None:
            clauses.using(config)
    return clauses.declare(clause, handler)


# ═══════════════════════════════════════════════════════════════════════════════
# Clauses
# ═══════════════════════════════════════════════════════════════════════════════


def parent(
    handler: ParentHandler,
    chain: ClauseSet | None = None,
    *,
    config: Config | None = None,
) -> ClauseSet:
    """
    Declare what the parent does. Receives the child's pid.
    Returns the open chain; it forks only once run.

    Example:
        F.parent(lambda pid: os.waitpid(pid, 0)).run()
    """
    return _configure(Clause.PARENT, handler, chain, config)


def child(
    handler: ChildHandler,
    chain: ClauseSet | None = None,
    *,
    config: Config | None = None,
) -> ClauseSet:
    """
    Declare what the child does.
    Returns the open chain; it forks only once run.

    If the handler returns, the child carries on after the fork block,
    so children that should not do that end with os._exit().

    Example:
        F.child(lambda: os.execvp("ls", ["ls", "-l"])).run()
    """
    return _configure(Clause.CHILD, handler, chain, config)


def retry(
    handler: RetryHandler,
    chain: ClauseSet | None = None,
    *,
    config: Config | None = None,
) -> ClauseSet:
    """
    Declare the retry policy. Receives the number of failed attempts so far.

    Without it only one fork is attempted.
    Returns the open chain; it forks only once run.
    """
    return _configure(Clause.RETRY, handler, chain, config)


def error(
    handler: ErrorHandler,
    chain: ClauseSet | None = None,
    *,
    config: Config | None = None,
) -> ClauseSet:
    """
    Declare what happens when forking failed and retry gave up.

    Receives the number of attempts. The OSError of the last attempt is the
    active exception, available through sys.exception(). Without this
    clause the process exits with "Cannot fork: <reason>".
    Returns the open chain; it forks only once run.
    """
    return _configure(Clause.ERROR, handler, chain, config)


def block(config: Config | None = None) -> ClauseSet:
    """
    Empty fork block, for use as a context manager.

    The block forks when the with-statement exits normally, including via
    return. If the body raises, nothing is forked.

    Example:
        with F.block() as fork:
            fork.child(worker)
            fork.retry(F.policy.retry.attempts(3))
    """
    return new_chain(config)


__all__ = ("parent", "child", "retry", "error", "block")
