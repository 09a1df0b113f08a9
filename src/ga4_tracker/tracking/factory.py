"""EventFactory: pure constructor for canonical events."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ga4_tracker.core.clock import IClock, SystemClock
from ga4_tracker.core.enums import EventCategory
from ga4_tracker.core.models import CanonicalEvent


class EventFactory:
    """Builds frozen :class:`CanonicalEvent` records.

    The parameter bag is taken as-is; validation is the builder's job.
    Building never fails and never looks at readiness state.
    """

    def __init__(self, clock: IClock | None = None) -> None:
        self._clock = clock or SystemClock()

    def build(
        self,
        name: str,
        params: Mapping[str, Any] | None = None,
        category: EventCategory = EventCategory.CUSTOM,
    ) -> CanonicalEvent:
        return CanonicalEvent(
            event_name=name,
            event_parameters=dict(params or {}),
            event_category=EventCategory(category),
            timestamp=self._clock.now_ms(),
        )
