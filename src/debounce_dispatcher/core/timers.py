"""Single-shot timer services."""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from collections.abc import Callable
from typing import Protocol

from ..config import TimerConfig

logger = logging.getLogger("debounce_dispatcher")


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class TimerService(Protocol):
    """Schedules a callback to run once after a delay."""

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    def cancel(self, handle: TimerHandle) -> None:
        ...


class ThreadingTimerService:
    """Timer service backed by one `threading.Timer` per schedule."""

    def __init__(self, config: TimerConfig | None = None) -> None:
        self._config = config or TimerConfig()
        self._counter = itertools.count(1)

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0.0, delay_ms) / 1000.0, callback)
        timer.daemon = self._config.daemon
        timer.name = f"{self._config.thread_name_prefix}-{next(self._counter)}"
        timer.start()
        return timer

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancel()


class _LoopTimer:
    """Handle for a callback armed on an event loop from any thread."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._lock = threading.Lock()
        self._handle: asyncio.TimerHandle | None = None
        self._cancelled = False

    def _arm(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._handle = self._loop.call_later(delay_seconds, callback)

    def _disarm(self) -> None:
        with self._lock:
            handle = self._handle
            self._handle = None
        if handle is not None:
            handle.cancel()

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
        if self._loop.is_closed():
            return
        try:
            self._loop.call_soon_threadsafe(self._disarm)
        except RuntimeError:
            # Loop closed between the check and the call.
            logger.debug("timer cancel skipped, event loop closed")


class AsyncioTimerService:
    """Timer service that fires callbacks on an asyncio event loop.

    `schedule` and `cancel` are safe to call from any thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> _LoopTimer:
        timer = _LoopTimer(self._loop)
        self._loop.call_soon_threadsafe(timer._arm, max(0.0, delay_ms) / 1000.0, callback)
        return timer

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancel()


__all__ = [
    "TimerHandle",
    "TimerService",
    "ThreadingTimerService",
    "AsyncioTimerService",
]
