"""
Pipe — parent reads what the child writes.

Level 2: forkline clauses
Level 1: os.pipe / os.waitpid (caller's job)
"""

import os

import forkline as F
from examples._infra import banner, reap, run


def main() -> None:
    banner("Fork: Parent ← Child over a pipe")
    read_fd, write_fd = os.pipe()

    def in_child() -> None:
        os.close(read_fd)
        with os.fdopen(write_fd, "w") as out:
            out.write("Line 1\n")
            out.write("Line 2\n")
        os._exit(0)

    def in_parent(pid: int) -> None:
        os.close(write_fd)
        with os.fdopen(read_fd) as reader:
            for line in reader:
                print(f"  ← {line.rstrip()}")
        print(f"  ✓ child {pid} exited with {reap(pid)}")

    (
        F.parent(in_parent)
        .child(in_child)
        .retry(F.policy.retry.attempts(5))
        .error(F.policy.error.raise_())
        .run()
    )


if __name__ == "__main__":
    run(main)
