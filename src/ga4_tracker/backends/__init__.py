"""Reporting backends.

* ``GtagLoader`` / ``DataLayerReporter`` -- the gtag script and data layer.
* ``MemoryReporter`` / ``StaticLoader`` / ``StaticEnvironment`` -- in-process.
* ``BatchingReporter`` -- bounded batching and retry in front of any reporter.
"""

from __future__ import annotations

from ga4_tracker.backends.batching import BatchingReporter
from ga4_tracker.backends.gtag import DataLayerReporter, GtagLoader
from ga4_tracker.backends.memory import (
    MemoryReporter,
    ReportCall,
    StaticEnvironment,
    StaticLoader,
)

__all__ = [
    "BatchingReporter",
    "DataLayerReporter",
    "GtagLoader",
    "MemoryReporter",
    "ReportCall",
    "StaticEnvironment",
    "StaticLoader",
]
