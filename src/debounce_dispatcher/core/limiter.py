"""Thread-safe debounce/throttle state machine."""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections.abc import Callable
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
from .runners import ActionRunner, resolve_runner
from .timers import ThreadingTimerService, TimerHandle, TimerService

logger = logging.getLogger("debounce_dispatcher")


@dataclass(slots=True, frozen=True)
class _PendingAction:
    action: Callable[..., Any]
    parameter: object
    runner: ActionRunner

    def bind(self) -> Callable[[], Any]:
        return functools.partial(call_action, self.action, self.parameter)


class RateLimiter:
    """Rate-limits invocations of the latest submitted action.

    One instance per event source. All state is guarded by a single re-entrant
    lock; the timer callback takes the same lock and checks the generation it
    was armed with, so a superseded timer never runs its action even if the
    timer service could not cancel it in time.
    """

    def __init__(
        self,
        mode: ExecutionMode,
        *,
        timer_service: TimerService | None = None,
        clock: Callable[[], float] | None = None,
        runner: ActionRunner | None = None,
        config: DispatcherConfig | None = None,
    ) -> None:
        self._mode = validate_mode(mode)
        self._config = config or DispatcherConfig()
        validate_dispatcher_config(self._config)
        self._timer_service = timer_service or ThreadingTimerService(self._config.timer)
        self._clock = clock or time.monotonic
        self._default_runner = runner

        self._lock = threading.RLock()
        self._generation = 0
        self._pending: TimerHandle | None = None
        self._pending_generation: int | None = None
        self._latest: _PendingAction | None = None
        self._last_fire_at: float | None = None
        self._disposed = False

    @property
    def mode(self) -> ExecutionMode:
        return self._mode

    @property
    def is_pending(self) -> bool:
        with self._lock:
            return self._pending_generation is not None

    @property
    def is_disposed(self) -> bool:
        with self._lock:
            return self._disposed

    @property
    def last_fire_at(self) -> float | None:
        with self._lock:
            return self._last_fire_at

    def trigger(
        self,
        interval_ms: float,
        action: Callable[..., Any],
        parameter: object = NO_PARAMETER,
        *,
        runner: ActionRunner | None = None,
    ) -> TriggerOutcome:
        interval = validate_interval_ms(interval_ms)
        validate_action(action)

        immediate: _PendingAction | None = None
        with self._lock:
            if self._disposed:
                logger.debug("trigger ignored, limiter disposed mode=%s", self._mode.value)
                return disposed_outcome(self._config, self._mode)

            self._cancel_pending_locked()

            target = resolve_runner(runner, self._default_runner)
            if target.is_shutting_down():
                logger.debug("trigger skipped, runner shutting down mode=%s", self._mode.value)
                return TriggerOutcome.SKIPPED_SHUTTING_DOWN

            submitted = _PendingAction(action=action, parameter=parameter, runner=target)
            if self._mode is ExecutionMode.DEBOUNCE:
                self._arm_locked(submitted, interval)
            else:
                now = self._clock()
                delay = throttle_delay_ms(
                    interval_ms=interval,
                    last_fire_at=self._last_fire_at,
                    now=now,
                )
                if delay > 0:
                    self._arm_locked(submitted, delay)
                else:
                    self._last_fire_at = advance_fire_time(self._last_fire_at, now)
                    immediate = submitted

        if immediate is None:
            return TriggerOutcome.SCHEDULED

        logger.debug("throttle executing immediately interval_ms=%s", interval)
        call_action(immediate.action, immediate.parameter)
        return TriggerOutcome.EXECUTED

    def cancel(self) -> bool:
        """Drop the pending timer, if any, without disposing."""

        with self._lock:
            if self._disposed or self._pending_generation is None:
                return False
            self._cancel_pending_locked()
            return True

    def flush(self) -> bool:
        """Run the pending action now instead of waiting for its timer."""

        with self._lock:
            if self._disposed or self._pending_generation is None or self._latest is None:
                return False
            pending = self._latest
            self._cancel_pending_locked()
            if pending.runner.is_shutting_down():
                logger.debug("flush dropped, runner shutting down mode=%s", self._mode.value)
                return False
            if self._mode is ExecutionMode.THROTTLE:
                self._last_fire_at = advance_fire_time(self._last_fire_at, self._clock())

        logger.debug("flushing pending action mode=%s", self._mode.value)
        pending.runner.run(pending.bind())
        return True

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._cancel_pending_locked()
            self._disposed = True
        logger.debug("limiter disposed mode=%s", self._mode.value)

    def __enter__(self) -> "RateLimiter":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.dispose()
        return False

    def _arm_locked(self, submitted: _PendingAction, delay_ms: float) -> None:
        self._generation += 1
        generation = self._generation
        self._latest = submitted
        self._pending_generation = generation
        try:
            handle = self._timer_service.schedule(
                delay_ms, functools.partial(self._fire, generation)
            )
        except BaseException:
            self._latest = None
            self._pending_generation = None
            raise
        # A timer service may fire synchronously; only keep a handle that is still live.
        if self._pending_generation == generation:
            self._pending = handle
        logger.debug(
            "timer armed mode=%s delay_ms=%s generation=%s",
            self._mode.value,
            delay_ms,
            generation,
        )

    def _cancel_pending_locked(self) -> None:
        handle = self._pending
        superseded = self._pending_generation
        self._pending = None
        self._pending_generation = None
        self._latest = None
        self._generation += 1
        if handle is not None:
            self._timer_service.cancel(handle)
        if superseded is not None:
            logger.debug(
                "pending timer cancelled mode=%s generation=%s",
                self._mode.value,
                superseded,
            )

    def _fire(self, generation: int) -> None:
        with self._lock:
            if self._disposed or generation != self._pending_generation:
                logger.debug(
                    "stale timer ignored mode=%s generation=%s",
                    self._mode.value,
                    generation,
                )
                return
            pending = self._latest
            self._pending = None
            self._pending_generation = None
            self._latest = None
            if pending is None:
                return
            if pending.runner.is_shutting_down():
                logger.debug("timer fired, runner shutting down mode=%s", self._mode.value)
                return
            if self._mode is ExecutionMode.THROTTLE:
                self._last_fire_at = advance_fire_time(self._last_fire_at, self._clock())

        logger.debug("timer fired mode=%s generation=%s", self._mode.value, generation)
        pending.runner.run(pending.bind())


class Debouncer(RateLimiter):
    """`RateLimiter` fixed to debounce mode."""

    def __init__(
        self,
        *,
        timer_service: TimerService | None = None,
        clock: Callable[[], float] | None = None,
        runner: ActionRunner | None = None,
        config: DispatcherConfig | None = None,
    ) -> None:
        super().__init__(
            ExecutionMode.DEBOUNCE,
            timer_service=timer_service,
            clock=clock,
            runner=runner,
            config=config,
        )


class Throttler(RateLimiter):
    """`RateLimiter` fixed to throttle mode."""

    def __init__(
        self,
        *,
        timer_service: TimerService | None = None,
        clock: Callable[[], float] | None = None,
        runner: ActionRunner | None = None,
        config: DispatcherConfig | None = None,
    ) -> None:
        super().__init__(
            ExecutionMode.THROTTLE,
            timer_service=timer_service,
            clock=clock,
            runner=runner,
            config=config,
        )


__all__ = [
    "RateLimiter",
    "Debouncer",
    "Throttler",
]
