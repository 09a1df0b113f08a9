"""Prometheus counters for the tracking runtime.

Counters live in the default registry; hosts expose them however they
already expose ``prometheus_client`` metrics.
"""

from __future__ import annotations

from prometheus_client import Counter

# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

EVENTS_DISPATCHED = Counter(
    "ga4_events_dispatched_total",
    "Events handed to the reporting channel",
    ["event_name", "category"],
)

EVENTS_DROPPED = Counter(
    "ga4_events_dropped_total",
    "Events dropped before reaching the reporting channel",
    ["reason"],
)

DISPATCH_ERRORS = Counter(
    "ga4_dispatch_errors_total",
    "Reporting channel failures",
    ["event_name"],
)

# ---------------------------------------------------------------------------
# Lifecycle / delivery
# ---------------------------------------------------------------------------

INIT_ATTEMPTS = Counter(
    "ga4_init_attempts_total",
    "Backend initialization attempts",
    ["outcome"],
)

BATCH_FLUSHES = Counter(
    "ga4_batch_flushes_total",
    "Batch flushes by outcome",
    ["outcome"],
)


def record_dispatch(event_name: str, category: str) -> None:
    EVENTS_DISPATCHED.labels(event_name=event_name, category=category).inc()


def record_drop(reason: str, count: int = 1) -> None:
    EVENTS_DROPPED.labels(reason=reason).inc(count)


def record_dispatch_error(event_name: str) -> None:
    DISPATCH_ERRORS.labels(event_name=event_name).inc()


def record_init(outcome: str) -> None:
    INIT_ATTEMPTS.labels(outcome=outcome).inc()


def record_flush(outcome: str) -> None:
    BATCH_FLUSHES.labels(outcome=outcome).inc()
