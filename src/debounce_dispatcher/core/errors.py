"""Error types."""

from __future__ import annotations


class DebounceError(Exception):
    """Base exception for this package."""


class DebounceValidationError(DebounceError):
    """Invalid argument or configuration rejected at call time."""


class DispatcherDisposedError(DebounceError):
    """Raised when a disposed limiter is triggered and raising is enabled."""


class RunnerShutdownError(DebounceError):
    """Raised when a callback is submitted to a runner that was shut down."""


__all__ = [
    "DebounceError",
    "DebounceValidationError",
    "DispatcherDisposedError",
    "RunnerShutdownError",
]
