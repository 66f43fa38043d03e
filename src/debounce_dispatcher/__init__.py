"""Public package exports for debounce dispatcher."""

from .async_dispatcher import AsyncDebounceDispatcher
from .config import DispatcherConfig, TimerConfig
from .core.async_limiter import AsyncDebouncer, AsyncRateLimiter, AsyncThrottler
from .core.errors import (
    DebounceError,
    DebounceValidationError,
    DispatcherDisposedError,
    RunnerShutdownError,
)
from .core.limiter import Debouncer, RateLimiter, Throttler
from .core.models import NO_PARAMETER, ExecutionMode, TriggerOutcome
from .core.runners import (
    ActionRunner,
    EventLoopRunner,
    ExecutorRunner,
    ImmediateRunner,
    current_runner,
    use_runner,
)
from .core.timers import AsyncioTimerService, ThreadingTimerService, TimerService
from .dispatcher import DebounceDispatcher

__all__ = [
    "DebounceDispatcher",
    "AsyncDebounceDispatcher",
    "DispatcherConfig",
    "TimerConfig",
    "RateLimiter",
    "Debouncer",
    "Throttler",
    "AsyncRateLimiter",
    "AsyncDebouncer",
    "AsyncThrottler",
    "ExecutionMode",
    "TriggerOutcome",
    "NO_PARAMETER",
    "ActionRunner",
    "ImmediateRunner",
    "ExecutorRunner",
    "EventLoopRunner",
    "current_runner",
    "use_runner",
    "TimerService",
    "ThreadingTimerService",
    "AsyncioTimerService",
    "DebounceError",
    "DebounceValidationError",
    "DispatcherDisposedError",
    "RunnerShutdownError",
]
