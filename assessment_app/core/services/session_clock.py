"""Countdown clock driving the lifecycle of an assessment session."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from assessment_app.constants.assessment_constants import (
    DEFAULT_TIME_LIMIT_MINUTES,
    TICK_INTERVAL_MS,
)


class Ticker(ABC):
    """Cooperative timer that calls back periodically on the owner's thread."""

    @abstractmethod
    def start(self, interval_ms: int, callback: Callable[[], None]) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @abstractmethod
    def is_active(self) -> bool:
        pass


def duration_from_minutes(time_limit_minutes: int | None) -> int:
    """Convert a time limit to seconds, falling back to the default limit."""
    minutes = time_limit_minutes or DEFAULT_TIME_LIMIT_MINUTES
    return minutes * 60


def format_countdown(seconds: int) -> str:
    seconds = max(0, seconds)
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


class SessionClock:
    """Counts down once per tick and reports expiry exactly once.

    The clock owns its ticker: ``start`` acquires it and ``stop`` releases it.
    Once expired the clock never ticks or fires again.
    """

    def __init__(
        self,
        duration_seconds: int,
        on_expire: Callable[[], None],
        ticker: Ticker,
        on_tick: Callable[[int], None] | None = None,
    ) -> None:
        if duration_seconds <= 0:
            raise ValueError("Clock duration must be a positive number of seconds.")
        self._remaining: int = duration_seconds
        self._duration: int = duration_seconds
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._ticker = ticker
        self._running: bool = False
        self._expired: bool = False

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def duration_seconds(self) -> int:
        return self._duration

    def is_running(self) -> bool:
        return self._running

    def has_expired(self) -> bool:
        return self._expired

    def start(self) -> None:
        if self._expired:
            raise RuntimeError("Cannot restart an expired clock.")
        if self._running:
            return
        self._running = True
        self._ticker.start(TICK_INTERVAL_MS, self.tick)
        self._publish()

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._ticker.stop()

    def tick(self) -> None:
        if not self._running or self._expired:
            return
        self._remaining = max(0, self._remaining - 1)
        self._publish()
        if self._remaining > 0:
            return
        # Guard first so a re-entrant tick cannot trigger a second expiry.
        self._expired = True
        self.stop()
        self._on_expire()

    def elapse(self, seconds: int) -> None:
        """Take time spent while stopped off the countdown.

        Reaching zero this way expires the clock just like a final tick.
        """
        if self._running:
            raise RuntimeError("Cannot skip time on a running clock.")
        if self._expired or seconds <= 0:
            return
        self._remaining = max(0, self._remaining - seconds)
        self._publish()
        if self._remaining == 0:
            self._expired = True
            self._on_expire()

    def format_remaining(self) -> str:
        return format_countdown(self._remaining)

    def _publish(self) -> None:
        if self._on_tick is not None:
            self._on_tick(self._remaining)
