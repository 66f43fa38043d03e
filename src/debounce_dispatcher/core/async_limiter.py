"""Async debounce/throttle state machine."""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Any

from ..config import DispatcherConfig
from .limiter_shared import (
    advance_fire_time,
    call_action,
    disposed_outcome,
    throttle_delay_ms,
    validate_action,
    validate_dispatcher_config,
    validate_interval_ms,
    validate_mode,
)
from .models import NO_PARAMETER, ExecutionMode, TriggerOutcome

logger = logging.getLogger("debounce_dispatcher")


@dataclass(slots=True, frozen=True)
class _PendingAction:
    action: Callable[..., Any]
    parameter: object


async def _invoke(pending: _PendingAction) -> None:
    result = call_action(pending.action, pending.parameter)
    if inspect.isawaitable(result):
        await result


class AsyncRateLimiter:
    """Rate limiter for code running on a single asyncio event loop.

    Actions may be plain callables or coroutine functions. Trailing executions
    run in a task on the current loop; all state changes happen without an
    intervening await, so no lock is needed.
    """

    def __init__(
        self,
        mode: ExecutionMode,
        *,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
        config: DispatcherConfig | None = None,
    ) -> None:
        self._mode = validate_mode(mode)
        self._config = config or DispatcherConfig()
        validate_dispatcher_config(self._config)
        self._clock = clock or time.monotonic
        self._sleep = sleeper or asyncio.sleep

        self._generation = 0
        self._task: asyncio.Task[None] | None = None
        self._last_task: asyncio.Task[None] | None = None
        self._pending_generation: int | None = None
        self._latest: _PendingAction | None = None
        self._last_fire_at: float | None = None
        self._disposed = False

    @property
    def mode(self) -> ExecutionMode:
        return self._mode

    @property
    def is_pending(self) -> bool:
        return self._pending_generation is not None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def last_fire_at(self) -> float | None:
        return self._last_fire_at

    async def trigger(
        self,
        interval_ms: float,
        action: Callable[..., Any],
        parameter: object = NO_PARAMETER,
    ) -> TriggerOutcome:
        interval = validate_interval_ms(interval_ms)
        validate_action(action)

        if self._disposed:
            logger.debug("trigger ignored, limiter disposed mode=%s", self._mode.value)
            return disposed_outcome(self._config, self._mode)

        self._cancel_pending()
        submitted = _PendingAction(action=action, parameter=parameter)

        if self._mode is ExecutionMode.DEBOUNCE:
            self._arm(submitted, interval)
            return TriggerOutcome.SCHEDULED

        now = self._clock()
        delay = throttle_delay_ms(interval_ms=interval, last_fire_at=self._last_fire_at, now=now)
        if delay > 0:
            self._arm(submitted, delay)
            return TriggerOutcome.SCHEDULED

        self._last_fire_at = advance_fire_time(self._last_fire_at, now)
        logger.debug("throttle executing immediately interval_ms=%s", interval)
        await _invoke(submitted)
        return TriggerOutcome.EXECUTED

    def cancel(self) -> bool:
        if self._disposed or self._pending_generation is None:
            return False
        self._cancel_pending()
        return True

    async def flush(self) -> bool:
        """Run the pending action now instead of waiting for its timer."""

        if self._disposed or self._pending_generation is None or self._latest is None:
            return False
        pending = self._latest
        self._cancel_pending()
        if self._mode is ExecutionMode.THROTTLE:
            self._last_fire_at = advance_fire_time(self._last_fire_at, self._clock())
        logger.debug("flushing pending action mode=%s", self._mode.value)
        await _invoke(pending)
        return True

    async def drain(self) -> None:
        """Wait until the most recent trailing execution has finished.

        Re-raises an exception raised by that execution.
        """

        while True:
            task = self._last_task
            if task is None:
                return
            await asyncio.wait({task})
            if task is not self._last_task:
                continue
            self._last_task = None
            if not task.cancelled() and task.exception() is not None:
                raise task.exception()  # type: ignore[misc]
            return

    def dispose(self) -> None:
        if self._disposed:
            return
        self._cancel_pending()
        self._disposed = True
        logger.debug("limiter disposed mode=%s", self._mode.value)

    async def __aenter__(self) -> "AsyncRateLimiter":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.dispose()
        return False

    def _arm(self, submitted: _PendingAction, delay_ms: float) -> None:
        self._generation += 1
        generation = self._generation
        self._latest = submitted
        self._pending_generation = generation
        task = asyncio.ensure_future(self._run_later(generation, delay_ms))
        self._task = task
        self._last_task = task
        logger.debug(
            "timer armed mode=%s delay_ms=%s generation=%s",
            self._mode.value,
            delay_ms,
            generation,
        )

    def _cancel_pending(self) -> None:
        task = self._task
        superseded = self._pending_generation
        self._task = None
        self._pending_generation = None
        self._latest = None
        self._generation += 1
        if task is not None and not task.done():
            task.cancel()
        if superseded is not None:
            logger.debug(
                "pending timer cancelled mode=%s generation=%s",
                self._mode.value,
                superseded,
            )

    async def _run_later(self, generation: int, delay_ms: float) -> None:
        await self._sleep(delay_ms / 1000.0)
        if self._disposed or generation != self._pending_generation:
            logger.debug("stale timer ignored mode=%s generation=%s", self._mode.value, generation)
            return
        pending = self._latest
        self._task = None
        self._pending_generation = None
        self._latest = None
        if pending is None:
            return
        if self._mode is ExecutionMode.THROTTLE:
            self._last_fire_at = advance_fire_time(self._last_fire_at, self._clock())
        logger.debug("timer fired mode=%s generation=%s", self._mode.value, generation)
        await _invoke(pending)


class AsyncDebouncer(AsyncRateLimiter):
    """`AsyncRateLimiter` fixed to debounce mode."""

    def __init__(
        self,
        *,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
        config: DispatcherConfig | None = None,
    ) -> None:
        super().__init__(ExecutionMode.DEBOUNCE, clock=clock, sleeper=sleeper, config=config)


class AsyncThrottler(AsyncRateLimiter):
    """`AsyncRateLimiter` fixed to throttle mode."""

    def __init__(
        self,
        *,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
        config: DispatcherConfig | None = None,
    ) -> None:
        super().__init__(ExecutionMode.THROTTLE, clock=clock, sleeper=sleeper, config=config)


__all__ = [
    "AsyncRateLimiter",
    "AsyncDebouncer",
    "AsyncThrottler",
]
