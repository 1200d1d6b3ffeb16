"""
ClauseSet — the in-progress declaration of one fork block.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from enum import Enum, auto
from types import TracebackType

from forkline._config import Config, DEFAULT_CONFIG
from forkline._errors import DuplicateClause, MalformedChain
from forkline._types import (
    Clause,
    ParentHandler,
    ChildHandler,
    RetryHandler,
    ErrorHandler,
)
from forkline.policy._retry import never
from forkline.policy._error import exit_

logger = logging.getLogger(__name__)

# Origin tag. Only clause sets built through this module carry it.
_ORIGIN = object()


def _noop_parent(child_id: int) -> None:
    pass


def _noop_child() -> None:
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════


class ChainState(Enum):
    """
    Lifecycle of a clause set.

        OPEN → DISPATCHED (activated, forked once)
             → ABANDONED  (scope exited with an exception, never forked)
    """

    OPEN = auto()
    DISPATCHED = auto()
    ABANDONED = auto()


# ═══════════════════════════════════════════════════════════════════════════════
# ClauseSet — Accumulator
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True, eq=False)
class ClauseSet:
    """
    Handlers for one fork block, collected in any order.

    Omitted clauses keep their defaults: no-op parent and child, no retry,
    and an error handler that terminates the process.

    The set is single use. It forks once, when run() is called or when the
    with-block it manages exits normally.

    Example:
        (
            F.child(serve)
            .parent(lambda pid: os.waitpid(pid, 0))
            .retry(F.policy.retry.attempts(5))
            .run()
        )

        with F.block() as fork:
            fork.child(serve)
            if detached:
                return           # still forks on the way out
            fork.parent(track)
    """

    parent_handler: ParentHandler = _noop_parent
    child_handler: ChildHandler = _noop_child
    retry_policy: RetryHandler = field(default_factory=never)
    error_handler: ErrorHandler = field(default_factory=exit_)
    config: Config = DEFAULT_CONFIG
    state: ChainState = ChainState.OPEN
    declared: set[Clause] = field(default_factory=set)
    _origin: object = None

    # ─── Declaration ─────────────────────────────────────────────────────────

    def declare(self, clause: Clause, handler: object) -> ClauseSet:
        """Fill one clause. Each clause may be filled once per chain."""
        self.ensure_open()
        if not callable(handler):
            raise MalformedChain(
                f"{clause.value} clause needs a callable, got {type(handler).__name__}"
            )
        if clause in self.declared:
            raise DuplicateClause(clause)

        match clause:
            case Clause.PARENT:
                self.parent_handler = handler
            case Clause.CHILD:
                self.child_handler = handler
            case Clause.RETRY:
                self.retry_policy = handler
            case Clause.ERROR:
                self.error_handler = handler

        self.declared.add(clause)
        logger.debug("Declared %s clause", clause.value)
        return self

    def parent(self, handler: ParentHandler) -> ClauseSet:
        """Run handler(child_pid) in the parent."""
        return self.declare(Clause.PARENT, handler)

    def child(self, handler: ChildHandler) -> ClauseSet:
        """Run handler() in the child."""
        return self.declare(Clause.CHILD, handler)

    def retry(self, handler: RetryHandler) -> ClauseSet:
        """Ask handler(attempts) whether to fork again after a failure."""
        return self.declare(Clause.RETRY, handler)

    def error(self, handler: ErrorHandler) -> ClauseSet:
        """Run handler(attempts) when forking failed for good."""
        return self.declare(Clause.ERROR, handler)

    def using(self, config: Config) -> ClauseSet:
        """Replace the configuration while the set is still open."""
        self.ensure_open()
        self.config = config
        return self

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    @property
    def is_open(self) -> bool:
        return self.state is ChainState.OPEN

    def ensure_open(self) -> None:
        if self.state is not ChainState.OPEN:
            raise MalformedChain(
                f"fork block already {self.state.name.lower()}; clause sets are single use"
            )

    def run(self) -> None:
        """Fork now and dispatch to exactly one handler."""
        # Import here to avoid circular import
        from forkline._dispatch import activate

        activate(self)

    def __enter__(self) -> ClauseSet:
        self.ensure_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            if self.is_open:
                self.state = ChainState.ABANDONED
                logger.debug("Fork block abandoned by %s", exc_type.__name__)
            return
        if self.is_open:
            self.run()

    def __del__(self) -> None:
        # Never forks from here; a dropped open chain is a caller bug.
        if self._origin is _ORIGIN and self.state is ChainState.OPEN:
            logger.warning("Fork block collected without run(); nothing was forked")
            warnings.warn(
                "fork block was never forked; end the chain with .run() or use it as a with-block",
                ResourceWarning,
                stacklevel=2,
            )


# ═══════════════════════════════════════════════════════════════════════════════
# Chain Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def new_chain(config: Config | None = None) -> ClauseSet:
    """Fresh clause set with every default in place."""
    return ClauseSet(
        config=config if config is not None else DEFAULT_CONFIG,
        _origin=_ORIGIN,
    )


def continue_chain(chain: object) -> ClauseSet:
    """Validate a chain argument and return it as a live clause set."""
    if not isinstance(chain, ClauseSet) or chain._origin is not _ORIGIN:
        raise MalformedChain(
            f"expected a fork block from a previous clause, got {type(chain).__name__}"
        )
    chain.ensure_open()
    return chain


__all__ = (
    "ChainState",
    "ClauseSet",
    "new_chain",
    "continue_chain",
)
