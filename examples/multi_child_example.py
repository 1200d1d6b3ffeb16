"""
Multi-child — fan work out to several children.

Children echo what they receive until EOF. The parent keeps the write
ends, sends messages at random, then closes and reaps.
"""

import os
import random
from typing import TextIO

import forkline as F
from examples._infra import banner, reap, run

NUM_CHILDREN = 5


def echo_until_eof(num: int, read_fd: int, inherited: list[TextIO]) -> None:
    # Earlier siblings' write ends would keep their pipes open forever.
    for pipe in inherited:
        pipe.close()
    with os.fdopen(read_fd) as reader:
        for line in reader:
            print(f"  child {num}: [{line.rstrip()}]")
    os._exit(0)


def main() -> None:
    banner("Fork: Fan-out to children")
    pids: list[int] = []
    writers: list[TextIO] = []

    for num in range(1, NUM_CHILDREN + 1):
        read_fd, write_fd = os.pipe()
        writer = os.fdopen(write_fd, "w")

        with F.block() as fork:
            fork.child(lambda: echo_until_eof(num, read_fd, [*writers, writer]))
            fork.parent(pids.append)

        # Parent only from here on
        os.close(read_fd)
        writers.append(writer)

    for i in range(20):
        pipe = random.choice(writers)
        pipe.write(f"message {i}\n")
        pipe.flush()

    for pid, pipe in zip(pids, writers):
        pipe.close()
        print(f"  ✓ child {pid} exited with {reap(pid)}")


if __name__ == "__main__":
    run(main)
