"""
Fork configuration — where the duplication primitive comes from.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from forkline._types import Forker


def _os_fork() -> int:
    # Late lookup so monkeypatching os.fork reaches every Config.
    return os.fork()


# ═══════════════════════════════════════════════════════════════════════════════
# Config — Immutable Settings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Config:
    """
    Settings shared by a fork block.

    Example:
        config = F.Config().with_forker(fake_fork)
        F.child(work, config=config).run()

    Note: Immutable — each method returns a new Config.
    """

    forker: Forker = field(default=_os_fork)

    def with_forker(self, forker: Forker) -> Config:
        """
        Replace the duplication primitive.

        The callable must behave like os.fork(): return the child's pid in
        the parent, 0 in the child, and raise OSError on failure.
        """
        return Config(forker=forker)


DEFAULT_CONFIG = Config()


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("Config", "DEFAULT_CONFIG")
