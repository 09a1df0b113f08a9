"""Time sources for event stamping.

``SystemClock`` reads the host clock.  ``ManualClock`` only moves when told
to, optionally stepping forward on every read so consecutive events get
distinct, predictable timestamps.
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from typing import Protocol

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class IClock(Protocol):
    """What the runtime needs from a time source."""

    def now(self) -> datetime:
        """Aware UTC datetime, used for the ``"js"`` bootstrap command."""
        ...

    def now_ms(self) -> int:
        """Epoch milliseconds, used for ``event_timestamp``."""
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000


class ManualClock:
    """Deterministic clock for tests and offline replays.

    Parameters
    ----------
    start:
        Initial instant; naive datetimes are taken as UTC.
    step_ms:
        Amount ``now_ms()`` moves forward after each read.
    """

    def __init__(self, start: datetime | None = None, *, step_ms: int = 0) -> None:
        if start is None:
            start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        elif start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        if step_ms < 0:
            raise ValueError(f"step_ms must be >= 0, got {step_ms}")
        self._current = start
        self._step = timedelta(milliseconds=step_ms)

    def now(self) -> datetime:
        return self._current

    def now_ms(self) -> int:
        stamp = (self._current - _EPOCH) // timedelta(milliseconds=1)
        self._current += self._step
        return stamp

    def advance(self, ms: int) -> None:
        if ms < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._current += timedelta(milliseconds=ms)

    def jump_to(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        if instant < self._current:
            raise ValueError(f"ManualClock cannot move backwards: {instant} < {self._current}")
        self._current = instant
