"""Core enums and sentinels."""

from __future__ import annotations

import enum


class ExecutionMode(enum.Enum):
    DEBOUNCE = "debounce"
    THROTTLE = "throttle"


class TriggerOutcome(enum.Enum):
    """What a single trigger call did."""

    SCHEDULED = "scheduled"
    EXECUTED = "executed"
    SKIPPED_SHUTTING_DOWN = "skipped_shutting_down"
    SKIPPED_DISPOSED = "skipped_disposed"

    @property
    def skipped(self) -> bool:
        return self in (TriggerOutcome.SKIPPED_SHUTTING_DOWN, TriggerOutcome.SKIPPED_DISPOSED)


class _NoParameter(enum.Enum):
    NO_PARAMETER = "NO_PARAMETER"

    def __repr__(self) -> str:
        return "NO_PARAMETER"


# Distinct from None: the action is called without arguments.
NO_PARAMETER = _NoParameter.NO_PARAMETER


__all__ = [
    "ExecutionMode",
    "TriggerOutcome",
    "NO_PARAMETER",
]
