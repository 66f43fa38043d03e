from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from debounce_dispatcher.core.errors import RunnerShutdownError
from debounce_dispatcher.core.limiter import Debouncer
from debounce_dispatcher.core.runners import (
    ExecutorRunner,
    ImmediateRunner,
    current_runner,
    resolve_runner,
    use_runner,
)
from tests.shared.fakes import Recorder, SwitchableRunner


def test_immediate_runner_runs_inline_and_returns_result():
    runner = ImmediateRunner()
    assert runner.run(lambda: 42) == 42
    assert runner.is_shutting_down() is False


def test_executor_runner_surfaces_action_exception_on_future():
    executor = ThreadPoolExecutor(max_workers=1)
    runner = ExecutorRunner(executor)

    def boom() -> None:
        raise RuntimeError("inside executor")

    future = runner.run(boom)
    with pytest.raises(RuntimeError, match="inside executor"):
        future.result(timeout=5)
    runner.shutdown()


def test_executor_runner_rejects_work_after_shutdown():
    runner = ExecutorRunner(ThreadPoolExecutor(max_workers=1))
    runner.shutdown()

    assert runner.is_shutting_down() is True
    with pytest.raises(RunnerShutdownError):
        runner.run(lambda: None)


def test_use_runner_sets_and_restores_ambient_runner():
    outer = SwitchableRunner()
    inner = SwitchableRunner()
    assert current_runner() is None

    with use_runner(outer):
        assert current_runner() is outer
        with use_runner(inner):
            assert current_runner() is inner
        assert current_runner() is outer

    assert current_runner() is None


def test_resolve_runner_prefers_explicit_then_ambient_then_default():
    explicit = SwitchableRunner()
    ambient = SwitchableRunner()
    default = SwitchableRunner()

    with use_runner(ambient):
        assert resolve_runner(explicit, default) is explicit
        assert resolve_runner(None, default) is ambient
    assert resolve_runner(None, default) is default
    assert isinstance(resolve_runner(None), ImmediateRunner)


def test_limiter_uses_ambient_runner_captured_at_trigger_time(timers):
    limiter = Debouncer(timer_service=timers, clock=timers.clock)
    ambient = SwitchableRunner()
    recorder = Recorder(timers)

    with use_runner(ambient):
        limiter.trigger(50, recorder, "x")
    timers.advance(50)

    assert recorder.payloads == ["x"]
    assert ambient.runs == 1


def test_limiter_default_runner_is_used_when_none_given(timers):
    default = SwitchableRunner()
    limiter = Debouncer(timer_service=timers, clock=timers.clock, runner=default)

    limiter.trigger(50, Recorder(timers), "x")
    timers.advance(50)

    assert default.runs == 1


def test_limiter_runs_action_on_executor_thread(timers):
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="action-worker")
    runner = ExecutorRunner(executor)
    limiter = Debouncer(timer_service=timers, clock=timers.clock, runner=runner)
    done = threading.Event()
    seen: list[str] = []

    def action(payload: str) -> None:
        seen.append(f"{payload}@{threading.current_thread().name}")
        done.set()

    limiter.trigger(10, action, "x")
    timers.advance(10)

    assert done.wait(timeout=5)
    assert seen[0].startswith("x@action-worker")
    runner.shutdown()


def test_limiter_skips_trigger_once_executor_runner_is_shut_down(timers):
    runner = ExecutorRunner(ThreadPoolExecutor(max_workers=1))
    limiter = Debouncer(timer_service=timers, clock=timers.clock, runner=runner)
    runner.shutdown()

    outcome = limiter.trigger(10, Recorder(timers), "x")

    assert outcome.skipped is True
    assert timers.scheduled == []


def test_executor_runner_maps_executor_shutdown_race_to_runner_error():
    executor = ThreadPoolExecutor(max_workers=1)
    runner = ExecutorRunner(executor)
    executor.shutdown()

    assert runner.is_shutting_down() is False
    with pytest.raises(RunnerShutdownError):
        runner.run(lambda: None)
