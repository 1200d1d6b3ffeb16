"""Shared test fixtures for forkline.

Provides a scripted fork primitive and a call recorder so fork blocks can be
exercised without duplicating the test process.
"""

from __future__ import annotations

import errno

import pytest

import forkline as F


class ScriptedFork:
    """Stand-in for os.fork that replays a script.

    Each entry is either a pid to return (0 means "we are the child") or an
    OSError to raise. The last entry repeats once the script runs out.
    """

    def __init__(self, *script: int | OSError) -> None:
        assert script, "script needs at least one step"
        self.script = list(script)
        self.calls = 0

    def __call__(self) -> int:
        step = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        if isinstance(step, OSError):
            raise step
        return step


def eagain() -> OSError:
    return OSError(errno.EAGAIN, "Resource temporarily unavailable")


class Recorder:
    """Collects (event, payload) pairs in call order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def __call__(self, event: str, payload: object = None) -> None:
        self.events.append((event, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def record() -> Recorder:
    return Recorder()


@pytest.fixture
def as_parent() -> ScriptedFork:
    """Forker that always lands in the parent with pid 4242."""
    return ScriptedFork(4242)


@pytest.fixture
def as_child() -> ScriptedFork:
    """Forker that always lands in the child."""
    return ScriptedFork(0)


@pytest.fixture
def always_fails() -> ScriptedFork:
    return ScriptedFork(eagain())


def config_for(forker: ScriptedFork) -> F.Config:
    return F.Config().with_forker(forker)
