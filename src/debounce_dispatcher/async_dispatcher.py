"""Public async dispatcher entrypoint."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Any

from .config import DispatcherConfig
from .core.async_limiter import AsyncDebouncer, AsyncThrottler
from .core.limiter_shared import validate_dispatcher_config
from .core.models import NO_PARAMETER, TriggerOutcome


class AsyncDebounceDispatcher:
    """Async counterpart of `DebounceDispatcher` for a single event loop."""

    def __init__(
        self,
        *,
        config: DispatcherConfig | None = None,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._config = config or DispatcherConfig()
        validate_dispatcher_config(self._config)

        self._debouncer = AsyncDebouncer(clock=clock, sleeper=sleeper, config=self._config)
        self._throttler = AsyncThrottler(clock=clock, sleeper=sleeper, config=self._config)
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    async def debounce(
        self,
        interval_ms: float,
        action: Callable[..., Any],
        parameter: object = NO_PARAMETER,
    ) -> TriggerOutcome:
        return await self._debouncer.trigger(interval_ms, action, parameter)

    async def throttle(
        self,
        interval_ms: float,
        action: Callable[..., Any],
        parameter: object = NO_PARAMETER,
    ) -> TriggerOutcome:
        return await self._throttler.trigger(interval_ms, action, parameter)

    async def drain(self) -> None:
        await self._debouncer.drain()
        await self._throttler.drain()

    def dispose(self) -> None:
        if self._disposed:
            return
        self._debouncer.dispose()
        self._throttler.dispose()
        self._disposed = True

    async def close(self) -> None:
        self.dispose()

    async def __aenter__(self) -> "AsyncDebounceDispatcher":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False


__all__ = [
    "AsyncDebounceDispatcher",
]
