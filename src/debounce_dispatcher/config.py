"""Dispatcher configuration."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class TimerConfig:
    """Threading timer settings."""

    daemon: bool = True
    thread_name_prefix: str = "debounce-timer"

    def validate(self) -> None:
        if not isinstance(self.daemon, bool):
            raise ValueError("timer.daemon must be bool")
        if not self.thread_name_prefix:
            raise ValueError("timer.thread_name_prefix must not be empty")


@dataclass(slots=True, frozen=True)
class DispatcherConfig:
    """Runtime configuration for rate limiters."""

    timer: TimerConfig = field(default_factory=TimerConfig)
    raise_on_disposed: bool = False

    def validate(self) -> None:
        if not isinstance(self.raise_on_disposed, bool):
            raise ValueError("raise_on_disposed must be bool")
        self.timer.validate()


__all__ = [
    "TimerConfig",
    "DispatcherConfig",
]
