"""Tests for the dispatcher (attempt, resolve, route, activate).

Covers:
- attempt() wraps the primitive in a Result
- resolve(): first success ends the loop, retry sees 1, 2, 3...
- exactly one handler fires per activation
- defaults are idempotent (omitted parent == explicit no-op parent)
- a clause set forks once and cannot be activated again
- handler exceptions and non-local exits propagate
- the error handler runs with the OSError active
- scenarios: child-only block, retry-then-succeed, no-retry failure,
  failure with no clauses at all
"""

from __future__ import annotations

import errno
import gc
import logging
import sys

import pytest
from kungfu import Ok, Error

import forkline as F
from tests.conftest import ScriptedFork, config_for, eagain


# ---------------------------------------------------------------------------
# attempt()
# ---------------------------------------------------------------------------


class TestAttempt:
    def test_success_is_ok(self):
        result = F.attempt(lambda: 17)
        assert isinstance(result, Ok)
        match result:
            case Ok(pid):
                assert pid == 17

    def test_oserror_is_error(self):
        failure = eagain()

        def boom() -> int:
            raise failure

        result = F.attempt(boom)
        assert isinstance(result, Error)
        match result:
            case Error(e):
                assert e is failure

    def test_other_exceptions_propagate(self):
        def broken() -> int:
            raise RuntimeError("not an OS failure")

        with pytest.raises(RuntimeError):
            F.attempt(broken)


# ---------------------------------------------------------------------------
# resolve()
# ---------------------------------------------------------------------------


class TestResolve:
    def test_parent_outcome(self, as_parent):
        outcome = F.resolve(F.block(config_for(as_parent)))
        assert outcome == F.Parent(4242)

    def test_child_outcome(self, as_child):
        assert F.resolve(F.block(config_for(as_child))) == F.Child()

    def test_failure_without_retry_is_single_attempt(self, always_fails):
        outcome = F.resolve(F.block(config_for(always_fails)))
        assert isinstance(outcome, F.Failed)
        assert outcome.attempts == 1
        assert outcome.error.errno == errno.EAGAIN
        assert always_fails.calls == 1

    def test_retry_counts_failures(self, always_fails):
        seen: list[int] = []

        def policy(n: int) -> bool:
            seen.append(n)
            return n < 4

        outcome = F.resolve(F.retry(policy, config=config_for(always_fails)))

        assert seen == [1, 2, 3, 4]
        assert outcome == F.Failed(4, outcome.error)
        assert always_fails.calls == 4

    def test_first_success_ends_loop(self):
        fork = ScriptedFork(eagain(), 99, eagain())
        seen: list[int] = []
        clauses = F.retry(lambda n: seen.append(n) or True, config=config_for(fork))

        assert F.resolve(clauses) == F.Parent(99)
        assert fork.calls == 2
        assert seen == [1]

    def test_retry_forever_until_success(self):
        fork = ScriptedFork(*[eagain()] * 25, 0)
        clauses = F.retry(lambda n: True, config=config_for(fork))

        assert F.resolve(clauses) == F.Child()
        assert fork.calls == 26

    def test_retry_never_consulted_on_success(self, as_parent):
        def policy(n: int) -> bool:
            raise AssertionError("retry consulted after success")

        assert F.resolve(F.retry(policy, config=config_for(as_parent))) == F.Parent(4242)

    def test_failed_attempts_are_logged(self, caplog):
        fork = ScriptedFork(eagain(), 7)
        caplog.set_level(logging.DEBUG, logger="forkline")

        F.resolve(F.retry(lambda n: True, config=config_for(fork)))

        assert "Fork attempt 1 failed" in caplog.text

    def test_handled_failures_stay_quiet(self, caplog, record):
        gc.collect()
        fork = ScriptedFork(eagain())
        caplog.set_level(logging.WARNING, logger="forkline")

        (
            F.retry(F.policy.retry.attempts(3), config=config_for(fork))
            .error(lambda n: record("error", n))
            .run()
        )

        assert record.events == [("error", 3)]
        assert caplog.records == []


# ---------------------------------------------------------------------------
# route() / activate(): exactly one handler
# ---------------------------------------------------------------------------


def full_block(record, forker: ScriptedFork) -> F.ClauseSet:
    return (
        F.block(config_for(forker))
        .parent(lambda pid: record("parent", pid))
        .child(lambda: record("child"))
        .error(lambda n: record("error", n))
    )


class TestExactlyOneHandler:
    def test_parent_branch(self, record, as_parent):
        full_block(record, as_parent).run()
        assert record.events == [("parent", 4242)]

    def test_child_branch(self, record, as_child):
        full_block(record, as_child).run()
        assert record.events == [("child", None)]

    def test_error_branch(self, record, always_fails):
        full_block(record, always_fails).run()
        assert record.events == [("error", 1)]

    def test_route_failed_outcome(self, record):
        clauses = F.error(lambda n: record("error", n))
        F.route(clauses, F.Failed(3, eagain()))
        assert record.events == [("error", 3)]

    def test_activate_function(self, record, as_parent):
        F.activate(F.parent(lambda pid: record("parent", pid), config=config_for(as_parent)))
        assert record.names() == ["parent"]

    def test_execution_continues_after_block(self, record, as_parent):
        full_block(record, as_parent).run()
        record("after")
        assert record.names() == ["parent", "after"]


class TestSingleUse:
    def test_run_twice(self, as_parent):
        clauses = F.parent(lambda pid: None, config=config_for(as_parent))
        clauses.run()
        with pytest.raises(F.MalformedChain):
            clauses.run()
        assert as_parent.calls == 1

    def test_state_after_run(self, as_child):
        clauses = F.child(lambda: None, config=config_for(as_child))
        clauses.run()
        assert clauses.state is F.ChainState.DISPATCHED

    def test_handler_cannot_rerun_its_own_block(self, as_parent):
        holder: list[F.ClauseSet] = []
        clauses = F.parent(lambda pid: holder[0].run(), config=config_for(as_parent))
        holder.append(clauses)

        with pytest.raises(F.MalformedChain):
            clauses.run()
        assert as_parent.calls == 1


class TestPropagation:
    def test_handler_exception_propagates(self, as_child):
        def child() -> None:
            raise LookupError("from child")

        with pytest.raises(LookupError, match="from child"):
            F.child(child, config=config_for(as_child)).run()

    def test_system_exit_propagates(self, as_parent):
        with pytest.raises(SystemExit) as exc_info:
            F.parent(lambda pid: sys.exit(3), config=config_for(as_parent)).run()
        assert exc_info.value.code == 3

    def test_error_handler_sees_os_error(self, always_fails):
        seen: list[BaseException | None] = []
        F.error(lambda n: seen.append(sys.exception()), config=config_for(always_fails)).run()

        assert isinstance(seen[0], OSError)
        assert seen[0].errno == errno.EAGAIN

    def test_error_handler_exception_chains_os_error(self, always_fails):
        def on_error(n: int) -> None:
            raise RuntimeError("gave up")

        with pytest.raises(RuntimeError) as exc_info:
            F.error(on_error, config=config_for(always_fails)).run()
        assert isinstance(exc_info.value.__context__, OSError)

    def test_no_exception_active_after_error_handler(self, always_fails):
        F.error(lambda n: None, config=config_for(always_fails)).run()
        assert sys.exception() is None


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_omitted_parent_matches_explicit_noop(self, record):
        implicit_fork = ScriptedFork(4242)
        explicit_fork = ScriptedFork(4242)

        F.child(lambda: record("child"), config=config_for(implicit_fork)).run()
        record("after-implicit")
        F.child(lambda: record("child"), config=config_for(explicit_fork)).parent(lambda pid: None).run()
        record("after-explicit")

        assert record.names() == ["after-implicit", "after-explicit"]
        assert implicit_fork.calls == explicit_fork.calls == 1

    def test_empty_block_still_forks_once(self, as_parent):
        F.block(config_for(as_parent)).run()
        assert as_parent.calls == 1


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_child_only_block_in_child(self, record, as_child):
        F.child(lambda: record("ran-as-child"), config=config_for(as_child)).run()
        assert record.events == [("ran-as-child", None)]

    def test_child_only_block_in_parent(self, record, as_parent):
        F.child(lambda: record("ran-as-child"), config=config_for(as_parent)).run()
        record("continued")
        assert record.events == [("continued", None)]

    def test_retry_then_succeed(self, record):
        fork = ScriptedFork(eagain(), eagain(), 31337)
        retries: list[int] = []

        def policy(n: int) -> bool:
            retries.append(n)
            return n < 3

        (
            F.retry(policy, config=config_for(fork))
            .parent(lambda pid: record("parent", pid))
            .child(lambda: record("child"))
            .run()
        )

        assert retries == [1, 2]
        assert record.events == [("parent", 31337)]
        assert fork.calls == 3

    def test_no_retry_reports_one_attempt(self, record, always_fails):
        (
            F.retry(lambda n: False, config=config_for(always_fails))
            .error(lambda n: record("error", n))
            .run()
        )
        assert record.events == [("error", 1)]
        assert always_fails.calls == 1

    def test_no_clauses_failure_terminates_with_os_text(self, always_fails):
        with pytest.raises(SystemExit) as exc_info:
            F.block(config_for(always_fails)).run()
        assert "Resource temporarily unavailable" in str(exc_info.value.code)
        assert always_fails.calls == 1
