"""Bounded batching and retry in front of a reporting channel.

``"event"`` commands are queued and forwarded in batches by a background
loop; every other command passes straight through so bootstrap ordering
is preserved.  Delivery errors are logged, never raised: analytics must
not break the host application.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from collections import deque
from typing import Any

from ga4_tracker.core.config import BatchingConfig
from ga4_tracker.core.interfaces import IReporter
from ga4_tracker.observability.metrics import record_drop, record_flush

logger = logging.getLogger(__name__)

_Call = tuple[str, Any, "dict[str, Any] | None"]


class BatchingReporter:
    """Queueing decorator for an :class:`IReporter`.

    Parameters
    ----------
    inner:
        Reporter that receives the forwarded calls.
    config:
        Batch size, flush interval, queue bound and retry policy.
    """

    def __init__(self, inner: IReporter, config: BatchingConfig) -> None:
        self._inner = inner
        self._config = config

        self._queue: deque[_Call] = deque()
        self._lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None
        self._flush_task: asyncio.Task[None] | None = None
        self._running = False

        # Counters
        self._events_forwarded: int = 0
        self._events_dropped: int = 0
        self._flush_count: int = 0
        self._error_count: int = 0

    # -- lifecycle ----------------------------------------------------------

    async def start(self) -> None:
        """Start the background flush loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._flush_loop(), name="ga4-batch-loop")
        logger.info(
            "BatchingReporter started (batch_size=%d, interval=%dms)",
            self._config.batch_size,
            self._config.batch_timeout_ms,
        )

    async def stop(self) -> None:
        """Stop the background loop and flush whatever is queued."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
        if self._flush_task is not None:
            # Let a requested flush finish; its batch is already dequeued
            await self._flush_task
            self._flush_task = None
        await self.flush()
        logger.info(
            "BatchingReporter stopped (forwarded=%d, dropped=%d, errors=%d)",
            self._events_forwarded,
            self._events_dropped,
            self._error_count,
        )

    def cancel(self) -> None:
        """Stop without flushing; queued events are discarded."""
        self._running = False
        for task in (self._task, self._flush_task):
            if task is not None and not task.done():
                task.cancel()
        self._task = None
        self._flush_task = None
        if self._queue:
            record_drop("cancelled", len(self._queue))
            self._events_dropped += len(self._queue)
            logger.warning("BatchingReporter cancelled with %d queued events", len(self._queue))
            self._queue.clear()

    # -- IReporter ----------------------------------------------------------

    def report(
        self, command: str, target: Any, payload: dict[str, Any] | None = None,
    ) -> None:
        if command != "event":
            self._inner.report(command, target, payload)
            return

        if len(self._queue) >= self._config.max_queue_size:
            self._queue.popleft()
            self._events_dropped += 1
            record_drop("queue_full")
            logger.warning(
                "BatchingReporter queue full (%d); dropped oldest event",
                self._config.max_queue_size,
            )

        self._queue.append((command, target, payload))
        if len(self._queue) >= self._config.batch_size:
            self.request_flush()

    # -- flushing -----------------------------------------------------------

    def request_flush(self) -> None:
        """Schedule a flush on the running loop unless one is pending."""
        if self._flush_task is not None and not self._flush_task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._flush_task = loop.create_task(self.flush(), name="ga4-batch-flush")

    async def flush(self) -> None:
        """Forward every queued call, one batch at a time.

        A call leaves the queue only once ``_deliver`` has settled it, so a
        flush cancelled mid-retry leaves it for the next flush.
        """
        async with self._lock:
            while self._queue:
                size = min(self._config.batch_size, len(self._queue))
                attempted = delivered = 0
                while attempted < size and self._queue:
                    call = self._queue[0]
                    ok = await self._deliver(call)
                    # report() may have evicted it while we were retrying
                    if self._queue and self._queue[0] is call:
                        self._queue.popleft()
                    attempted += 1
                    delivered += ok
                self._flush_count += 1
                record_flush("ok" if delivered == attempted else "partial")

    async def _flush_loop(self) -> None:
        interval = self._config.batch_timeout_ms / 1000
        while self._running:
            try:
                await asyncio.sleep(interval)
                await self.flush()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("BatchingReporter flush loop error")
                self._error_count += 1

    async def _deliver(self, call: _Call) -> bool:
        """Forward one call, retrying with exponential backoff."""
        attempts = self._config.max_retry_attempts
        for attempt in range(1, attempts + 1):
            try:
                self._inner.report(*call)
            except Exception as exc:
                self._error_count += 1
                if attempt == attempts:
                    self._events_dropped += 1
                    record_drop("retry_exhausted")
                    logger.error(
                        "BatchingReporter gave up on %s after %d attempts: %s",
                        call[1], attempts, exc,
                    )
                    return False
                wait = self._backoff_delay(attempt)
                logger.warning(
                    "Reporter error (attempt %d/%d), retrying in %.2fs: %s",
                    attempt, attempts, wait, exc,
                )
                await asyncio.sleep(wait)
                continue
            self._events_forwarded += 1
            return True
        return False

    def _backoff_delay(self, attempt: int) -> float:
        """Exponential backoff with jitter."""
        base = (self._config.retry_delay_ms / 1000) * (2 ** (attempt - 1))
        return base + random.uniform(0, base * 0.5)

    # -- observability ------------------------------------------------------

    @property
    def inner(self) -> IReporter:
        return self._inner

    @property
    def queue_size(self) -> int:
        return len(self._queue)

    @property
    def events_forwarded(self) -> int:
        return self._events_forwarded

    @property
    def events_dropped(self) -> int:
        return self._events_dropped

    @property
    def flush_count(self) -> int:
        return self._flush_count

    @property
    def error_count(self) -> int:
        return self._error_count
