"""Public dispatcher entrypoint."""

from __future__ import annotations

from collections.abc import Callable
from types import TracebackType
from typing import Any

from .config import DispatcherConfig
from .core.limiter import Debouncer, Throttler
from .core.limiter_shared import validate_dispatcher_config
from .core.models import NO_PARAMETER, TriggerOutcome
from .core.runners import ActionRunner
from .core.timers import ThreadingTimerService, TimerService


class DebounceDispatcher:
    """Provides `debounce()` and `throttle()` for one event source.

    `throttle()` runs the first call after a quiet period immediately and
    collapses further calls inside the interval into one trailing call.

    `debounce()` runs only after `interval_ms` passed without another call.

    In both modes only the latest action and parameter are executed.
    """

    def __init__(
        self,
        *,
        config: DispatcherConfig | None = None,
        timer_service: TimerService | None = None,
        clock: Callable[[], float] | None = None,
        runner: ActionRunner | None = None,
    ) -> None:
        self._config = config or DispatcherConfig()
        validate_dispatcher_config(self._config)

        resolved_timers = timer_service or ThreadingTimerService(self._config.timer)
        self._debouncer = Debouncer(
            timer_service=resolved_timers,
            clock=clock,
            runner=runner,
            config=self._config,
        )
        self._throttler = Throttler(
            timer_service=resolved_timers,
            clock=clock,
            runner=runner,
            config=self._config,
        )
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def debounce(
        self,
        interval_ms: float,
        action: Callable[..., Any],
        parameter: object = NO_PARAMETER,
        *,
        runner: ActionRunner | None = None,
    ) -> TriggerOutcome:
        return self._debouncer.trigger(interval_ms, action, parameter, runner=runner)

    def throttle(
        self,
        interval_ms: float,
        action: Callable[..., Any],
        parameter: object = NO_PARAMETER,
        *,
        runner: ActionRunner | None = None,
    ) -> TriggerOutcome:
        return self._throttler.trigger(interval_ms, action, parameter, runner=runner)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._debouncer.dispose()
        self._throttler.dispose()
        self._disposed = True

    close = dispose

    def __enter__(self) -> "DebounceDispatcher":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.dispose()
        return False


__all__ = [
    "DebounceDispatcher",
]
