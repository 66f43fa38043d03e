"""Action runners: the context a fired action executes in."""

from __future__ import annotations

import asyncio
import contextvars
import inspect
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Executor, Future
from contextlib import contextmanager
from typing import Any, Protocol

from .errors import RunnerShutdownError


# Coroutine actions started by any EventLoopRunner; the loop holds tasks weakly.
_running_tasks: set[asyncio.Future[Any]] = set()


class ActionRunner(Protocol):
    """Executes callbacks in a particular context."""

    def run(self, callback: Callable[[], Any]) -> object:
        ...

    def is_shutting_down(self) -> bool:
        ...


class ImmediateRunner:
    """Runs the callback synchronously on the calling (timer) thread."""

    def run(self, callback: Callable[[], Any]) -> Any:
        return callback()

    def is_shutting_down(self) -> bool:
        return False


class ExecutorRunner:
    """Submits callbacks to a `concurrent.futures.Executor`.

    Exceptions raised by the callback are stored on the returned future.
    """

    def __init__(self, executor: Executor) -> None:
        self._executor = executor
        self._lock = threading.Lock()
        self._shutting_down = False

    def run(self, callback: Callable[[], Any]) -> Future[Any]:
        if self.is_shutting_down():
            raise RunnerShutdownError("ExecutorRunner is shutting down")
        try:
            return self._executor.submit(callback)
        except RuntimeError as exc:
            # Executor shut down after the check above.
            raise RunnerShutdownError("ExecutorRunner is shutting down") from exc

    def is_shutting_down(self) -> bool:
        with self._lock:
            return self._shutting_down

    def shutdown(self, *, wait: bool = True) -> None:
        with self._lock:
            self._shutting_down = True
        self._executor.shutdown(wait=wait)


class EventLoopRunner:
    """Posts callbacks to an asyncio event loop.

    Coroutines returned by the callback are scheduled as tasks on the loop, so
    their exceptions surface on the task and the loop's exception handler.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._shutting_down = False

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def _invoke(self, callback: Callable[[], Any]) -> None:
        result = callback()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            _running_tasks.add(task)
            task.add_done_callback(_running_tasks.discard)

    def run(self, callback: Callable[[], Any]) -> asyncio.Handle:
        if self.is_shutting_down():
            raise RunnerShutdownError("EventLoopRunner is shutting down")
        return self._loop.call_soon_threadsafe(self._invoke, callback)

    def is_shutting_down(self) -> bool:
        return self._shutting_down or self._loop.is_closed()

    def shutdown(self) -> None:
        self._shutting_down = True


_ambient_runner: contextvars.ContextVar[ActionRunner | None] = contextvars.ContextVar(
    "debounce_dispatcher_runner",
    default=None,
)


def current_runner() -> ActionRunner | None:
    """Ambient runner set by `use_runner`, if any."""

    return _ambient_runner.get()


@contextmanager
def use_runner(runner: ActionRunner) -> Iterator[ActionRunner]:
    token = _ambient_runner.set(runner)
    try:
        yield runner
    finally:
        _ambient_runner.reset(token)


def resolve_runner(
    explicit: ActionRunner | None,
    default: ActionRunner | None = None,
) -> ActionRunner:
    """Pick the runner for a trigger call.

    Order: explicit argument, ambient runner, the limiter's default, the event
    loop running in this thread, then `ImmediateRunner`.
    """

    if explicit is not None:
        return explicit
    ambient = current_runner()
    if ambient is not None:
        return ambient
    if default is not None:
        return default
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return ImmediateRunner()
    return EventLoopRunner(loop)


__all__ = [
    "ActionRunner",
    "ImmediateRunner",
    "ExecutorRunner",
    "EventLoopRunner",
    "current_runner",
    "use_runner",
    "resolve_runner",
]
