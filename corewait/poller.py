"""Fixed-cadence polling of readiness conditions.

A condition is a zero-argument callable probing a dependency once. It returns
True when the dependency is ready and False when it is not ready yet; raising
is how it reports a problem that polling cannot fix. `poll` evaluates the
condition once per tick, never at t=0, and stops on the first ready result,
the first exception, or the deadline.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

from corewait.errors import DeadlineExceededError, PollCancelledError
from corewait.logging_config import get_logger
from corewait.utils.duration import format_duration

log = get_logger(__name__)

Condition = Callable[[], bool]

DEFAULT_INTERVAL = timedelta(seconds=2)
DEFAULT_DEADLINE = timedelta(seconds=45)


@dataclass(frozen=True, slots=True)
class PollConfig:
    interval: timedelta = DEFAULT_INTERVAL
    deadline: timedelta = DEFAULT_DEADLINE

    def __post_init__(self):
        _ensure_positive("interval", self.interval)
        _ensure_positive("deadline", self.deadline)

    def poll(self, condition: Condition, cancel: threading.Event | None = None) -> None:
        poll(self.interval, self.deadline, condition, cancel=cancel)


def poll(
    interval: timedelta,
    deadline: timedelta,
    condition: Condition,
    cancel: threading.Event | None = None,
) -> None:
    """
    Retry `condition` every `interval` until it is ready or `deadline` expires.

    Ticks sit on a fixed grid (start + k * interval). When a probe runs past
    one or more ticks those ticks are dropped, not queued. A tick that lands
    exactly on the deadline is still evaluated.

    Raises:
        DeadlineExceededError: the deadline elapsed before the condition was ready
        PollCancelledError: `cancel` was set while waiting for a tick
        Exception: whatever the condition raised, unchanged
    """
    _ensure_positive("interval", interval)
    _ensure_positive("deadline", deadline)

    waiter = cancel if cancel is not None else threading.Event()
    step = interval.total_seconds()
    start = time.monotonic()
    deadline_at = start + deadline.total_seconds()
    tick = 1
    attempts = 0

    while True:
        tick_at = start + tick * step
        if tick_at > deadline_at:
            _sleep_until(waiter, deadline_at, attempts)
            log.warning(
                "Condition not met before deadline",
                deadline=format_duration(deadline),
                attempts=attempts,
            )
            raise DeadlineExceededError(deadline)

        _sleep_until(waiter, tick_at, attempts)
        attempts += 1
        log.debug("Evaluating condition", attempt=attempts)
        if condition():
            log.debug("Condition met", attempts=attempts)
            return

        # Late ticks coalesce into the next one still in the future.
        elapsed_ticks = math.floor((time.monotonic() - start) / step)
        tick = max(tick + 1, elapsed_ticks + 1)


def _sleep_until(waiter: threading.Event, target: float, attempts: int) -> None:
    while True:
        if waiter.is_set():
            raise PollCancelledError(attempts)

        remaining = target - time.monotonic()
        if remaining <= 0:
            return

        if waiter.wait(timeout=remaining):
            raise PollCancelledError(attempts)


def _ensure_positive(name: str, value: timedelta) -> None:
    if value <= timedelta(0):
        raise ValueError(f"{name} must be positive, got {format_duration(value)}")
