"""
forkline — structured fork() for Python.

    import forkline as F

    (
        F.child(serve_client)
        .parent(lambda pid: os.waitpid(pid, 0))
        .retry(F.policy.retry.attempts(5, delay=timedelta(seconds=1)))
        .error(F.policy.error.raise_())
        .run()
    )

Clauses may be declared in any order; each at most once. Omitted clauses
default to: no-op parent, no-op child, no retry, and exit with
"Cannot fork: <reason>" on failure.
"""

from forkline import policy
from forkline._types import (
    Clause,
    Parent,
    Child,
    Failed,
    Outcome,
    ParentHandler,
    ChildHandler,
    RetryHandler,
    ErrorHandler,
    Forker,
)
from forkline._errors import (
    ForkError,
    MalformedChain,
    DuplicateClause,
    DuplicationFailure,
)
from forkline._config import Config, DEFAULT_CONFIG
from forkline._clauses import ClauseSet, ChainState
from forkline._declare import parent, child, retry, error, block
from forkline._dispatch import attempt, resolve, route, activate

__version__ = "0.1.0"

__all__ = (
    "policy",
    # Types
    "Clause",
    "Parent",
    "Child",
    "Failed",
    "Outcome",
    "ParentHandler",
    "ChildHandler",
    "RetryHandler",
    "ErrorHandler",
    "Forker",
    # Errors
    "ForkError",
    "MalformedChain",
    "DuplicateClause",
    "DuplicationFailure",
    # Config
    "Config",
    "DEFAULT_CONFIG",
    # Declaration
    "ClauseSet",
    "ChainState",
    "parent",
    "child",
    "retry",
    "error",
    "block",
    # Dispatch
    "attempt",
    "resolve",
    "route",
    "activate",
)
