from __future__ import annotations

import asyncio
import gc
import threading

import pytest

from debounce_dispatcher.core.errors import RunnerShutdownError
from debounce_dispatcher.core.limiter import Debouncer, Throttler
from debounce_dispatcher.core.models import TriggerOutcome
from debounce_dispatcher.core.runners import EventLoopRunner, resolve_runner
from debounce_dispatcher.core.timers import AsyncioTimerService


@pytest.mark.asyncio
async def test_event_loop_runner_runs_callback_on_loop():
    loop = asyncio.get_running_loop()
    runner = EventLoopRunner(loop)
    done: asyncio.Future[str] = loop.create_future()

    runner.run(lambda: done.set_result(threading.current_thread().name))

    assert await asyncio.wait_for(done, timeout=5) == threading.current_thread().name


@pytest.mark.asyncio
async def test_event_loop_runner_schedules_coroutine_results():
    loop = asyncio.get_running_loop()
    runner = EventLoopRunner(loop)
    done = asyncio.Event()

    async def action() -> None:
        await asyncio.sleep(0)
        done.set()

    runner.run(action)

    await asyncio.wait_for(done.wait(), timeout=5)


@pytest.mark.asyncio
async def test_event_loop_runner_shutdown_rejects_work():
    runner = EventLoopRunner(asyncio.get_running_loop())
    runner.shutdown()

    assert runner.is_shutting_down() is True
    with pytest.raises(RunnerShutdownError):
        runner.run(lambda: None)


@pytest.mark.asyncio
async def test_resolve_runner_uses_running_loop_by_default():
    runner = resolve_runner(None)
    assert isinstance(runner, EventLoopRunner)
    assert runner.loop is asyncio.get_running_loop()


@pytest.mark.asyncio
async def test_asyncio_timer_service_fires_and_cancels():
    service = AsyncioTimerService(asyncio.get_running_loop())
    fired = asyncio.Event()
    cancelled = asyncio.Event()

    service.schedule(10, fired.set)
    handle = service.schedule(50, cancelled.set)
    service.cancel(handle)
    service.cancel(handle)

    await asyncio.wait_for(fired.wait(), timeout=5)
    await asyncio.sleep(0.1)
    assert cancelled.is_set() is False


@pytest.mark.asyncio
async def test_asyncio_timer_service_accepts_schedule_from_other_thread():
    service = AsyncioTimerService(asyncio.get_running_loop())
    fired = asyncio.Event()

    await asyncio.to_thread(service.schedule, 10, fired.set)

    await asyncio.wait_for(fired.wait(), timeout=5)


@pytest.mark.asyncio
async def test_debouncer_on_event_loop_runs_latest_payload():
    loop = asyncio.get_running_loop()
    limiter = Debouncer(timer_service=AsyncioTimerService(loop))
    done: asyncio.Future[int] = loop.create_future()
    seen: list[int] = []

    def action(payload: int) -> None:
        seen.append(payload)
        done.set_result(payload)

    for payload in range(5):
        assert limiter.trigger(30, action, payload) is TriggerOutcome.SCHEDULED

    assert await asyncio.wait_for(done, timeout=5) == 4
    await asyncio.sleep(0.1)
    assert seen == [4]
    limiter.dispose()


@pytest.mark.asyncio
async def test_throttler_triggered_from_worker_thread_fires_on_loop():
    loop = asyncio.get_running_loop()
    runner = EventLoopRunner(loop)
    limiter = Throttler(timer_service=AsyncioTimerService(loop), runner=runner)
    done: asyncio.Future[str] = loop.create_future()
    loop_thread = threading.current_thread().name
    seen: list[tuple[str, str]] = []

    def action(payload: str) -> None:
        seen.append((payload, threading.current_thread().name))
        if payload == "trailing":
            done.set_result(payload)

    def burst() -> list[TriggerOutcome]:
        return [
            limiter.trigger(50, action, "leading"),
            limiter.trigger(50, action, "middle"),
            limiter.trigger(50, action, "trailing"),
        ]

    outcomes = await asyncio.to_thread(burst)

    assert outcomes[0] is TriggerOutcome.EXECUTED
    assert await asyncio.wait_for(done, timeout=5) == "trailing"
    assert [payload for payload, _ in seen] == ["leading", "trailing"]
    assert seen[-1][1] == loop_thread
    limiter.dispose()


@pytest.mark.asyncio
async def test_coroutine_action_through_limiter_and_loop_runner():
    loop = asyncio.get_running_loop()
    limiter = Debouncer(timer_service=AsyncioTimerService(loop))
    done = asyncio.Event()

    async def action(payload: str) -> None:
        await asyncio.sleep(0)
        assert payload == "async"
        done.set()

    limiter.trigger(10, action, "async")

    await asyncio.wait_for(done.wait(), timeout=5)


@pytest.mark.asyncio
async def test_coroutine_action_survives_garbage_collection_while_awaiting():
    loop = asyncio.get_running_loop()
    limiter = Debouncer(timer_service=AsyncioTimerService(loop))
    started = asyncio.Event()
    events: list[str] = []

    async def action() -> None:
        # Nothing outside this coroutine references the gate.
        gate = loop.create_future()
        events.append("started")
        started.set()
        try:
            await gate
        finally:
            events.append("finalized")

    limiter.trigger(10, action)
    await asyncio.wait_for(started.wait(), timeout=5)
    gc.collect()
    await asyncio.sleep(0)

    assert events == ["started"]
    running = [
        task
        for task in asyncio.all_tasks()
        if task.get_coro().__qualname__.endswith("<locals>.action")
    ]
    assert len(running) == 1
    running[0].cancel()
    await asyncio.wait(running)
    assert events == ["started", "finalized"]
