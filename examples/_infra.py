"""Shared infrastructure for examples."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def reap(pid: int) -> int:
    """Wait for a child and return its exit code."""
    _, status = os.waitpid(pid, 0)
    return os.waitstatus_to_exitcode(status)


def run(main: Callable[[], None]) -> None:
    logging.basicConfig(level=logging.DEBUG, format="  [%(process)d] %(name)s: %(message)s")
    main()
