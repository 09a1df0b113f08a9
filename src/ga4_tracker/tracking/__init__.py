"""Tracking runtime -- lifecycle, event construction and dispatch.

Public API
----------
::

    from ga4_tracker.tracking import (
        TrackingRuntime,
        InitializationManager,
        EventFactory,
        normalize_items,
    )
"""

from __future__ import annotations

from ga4_tracker.tracking.factory import EventFactory
from ga4_tracker.tracking.initialization import InitializationManager
from ga4_tracker.tracking.normalize import (
    normalize_item,
    normalize_items,
    round_money,
    round_whole,
)
from ga4_tracker.tracking.runtime import TrackingRuntime

__all__ = [
    "TrackingRuntime",
    "InitializationManager",
    "EventFactory",
    # Normalization
    "normalize_item",
    "normalize_items",
    "round_money",
    "round_whole",
]
