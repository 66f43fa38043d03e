"""Shared helpers for sync/async rate limiter implementations."""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any

from ..config import DispatcherConfig
from .errors import DebounceValidationError, DispatcherDisposedError
from .models import NO_PARAMETER, ExecutionMode, TriggerOutcome


def validate_interval_ms(interval_ms: object) -> float:
    if isinstance(interval_ms, bool) or not isinstance(interval_ms, (int, float)):
        raise DebounceValidationError("interval_ms must be a real number")
    value = float(interval_ms)
    if math.isnan(value) or math.isinf(value):
        raise DebounceValidationError("interval_ms must be finite")
    if value < 0:
        raise DebounceValidationError("interval_ms must be >= 0")
    return value


def validate_action(action: object) -> None:
    if action is None or not callable(action):
        raise DebounceValidationError("action must be callable")


def validate_mode(mode: object) -> ExecutionMode:
    if not isinstance(mode, ExecutionMode):
        raise DebounceValidationError(f"unknown execution mode: {mode!r}")
    return mode


def validate_dispatcher_config(config: DispatcherConfig) -> None:
    try:
        config.validate()
    except ValueError as exc:
        raise DebounceValidationError(str(exc)) from exc


def disposed_outcome(config: DispatcherConfig, mode: ExecutionMode) -> TriggerOutcome:
    if config.raise_on_disposed:
        raise DispatcherDisposedError(f"{mode.value} limiter is already disposed")
    return TriggerOutcome.SKIPPED_DISPOSED


def throttle_delay_ms(
    *,
    interval_ms: float,
    last_fire_at: float | None,
    now: float,
) -> float:
    """Remaining wait before a throttled action may run.

    Returns 0.0 when the action may run immediately. `last_fire_at` and `now`
    are clock readings in seconds; None means the action never ran.
    """

    if last_fire_at is None:
        return 0.0
    elapsed_ms = max(0.0, (now - last_fire_at) * 1000.0)
    if elapsed_ms >= interval_ms:
        return 0.0
    return interval_ms - elapsed_ms


def advance_fire_time(last_fire_at: float | None, now: float) -> float:
    if last_fire_at is None:
        return now
    return max(last_fire_at, now)


def call_action(action: Callable[..., Any], parameter: object) -> Any:
    if parameter is NO_PARAMETER:
        return action()
    return action(parameter)


__all__ = [
    "validate_interval_ms",
    "validate_action",
    "validate_mode",
    "validate_dispatcher_config",
    "disposed_outcome",
    "throttle_delay_ms",
    "advance_fire_time",
    "call_action",
]
