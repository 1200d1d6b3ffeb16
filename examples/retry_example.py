"""
Retry — survive transient fork failures.

A flaky primitive fails twice with EAGAIN; backoff retries until it works.
The second block never succeeds and reports through the error clause.
"""

import errno
import os

import forkline as F
from examples._infra import banner, reap, run


def flaky(failures: int):
    state = {"left": failures}

    def fork() -> int:
        if state["left"] > 0:
            state["left"] -= 1
            raise OSError(errno.EAGAIN, os.strerror(errno.EAGAIN))
        return os.fork()

    return fork


def main() -> None:
    banner("Fork: Retry with backoff")
    (
        F.child(lambda: os._exit(0), config=F.Config().with_forker(flaky(2)))
        .parent(lambda pid: print(f"  ✓ child {pid} exited with {reap(pid)}"))
        .retry(F.policy.retry.backoff(5, initial=0.05))
        .run()
    )

    banner("Fork: Give up after 3 attempts")
    (
        F.child(lambda: os._exit(0), config=F.Config().with_forker(flaky(10)))
        .retry(F.policy.retry.attempts(3))
        .error(lambda attempts: print(f"  ✗ no child after {attempts} attempts"))
        .run()
    )


if __name__ == "__main__":
    run(main)
