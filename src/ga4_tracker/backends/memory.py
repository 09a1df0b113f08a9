"""In-process backends for tests, offline hosts and server-side rendering.

No external dependencies.  ``MemoryReporter`` records every call in order.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from ga4_tracker.core.config import TrackerConfig
from ga4_tracker.core.interfaces import IReporter


@dataclass
class ReportCall:
    """One recorded ``report()`` invocation."""

    command: str
    target: Any
    payload: dict[str, Any] | None = None


class MemoryReporter:
    """Records calls; optionally raises to simulate a broken channel."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.calls: list[ReportCall] = []
        self.fail_with = fail_with

    def report(
        self, command: str, target: Any, payload: dict[str, Any] | None = None,
    ) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.calls.append(ReportCall(command, target, payload))

    # ------------------------------------------------------------------
    # Testing helpers
    # ------------------------------------------------------------------

    def events(self, name: str | None = None) -> list[ReportCall]:
        """Recorded ``"event"`` calls, optionally filtered by event name."""
        return [
            c for c in self.calls
            if c.command == "event" and (name is None or c.target == name)
        ]

    def last_event(self) -> ReportCall | None:
        events = self.events()
        return events[-1] if events else None

    def clear(self) -> None:
        self.calls.clear()


class StaticLoader:
    """Loader that hands back a prepared reporter, or fails.

    ``delay`` keeps the load in flight long enough to exercise concurrent
    ``init()`` calls.
    """

    def __init__(
        self,
        reporter: IReporter | None = None,
        *,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.reporter = reporter if reporter is not None else MemoryReporter()
        self.error = error
        self.delay = delay
        self.load_count = 0

    async def load(self, config: TrackerConfig) -> IReporter:
        self.load_count += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reporter


@dataclass
class StaticEnvironment:
    """Host environment with fixed answers."""

    path: str | None = None
    page_title: str | None = None
    page_referrer: str | None = None
    installed_reporter: IReporter | None = field(default=None)

    def location(self) -> str | None:
        return self.path

    def title(self) -> str | None:
        return self.page_title

    def referrer(self) -> str | None:
        return self.page_referrer

    def find_reporter(self) -> IReporter | None:
        return self.installed_reporter
