"""Test that the runtime records prometheus counters."""

import pytest
from prometheus_client import REGISTRY

from ga4_tracker.backends.memory import MemoryReporter, StaticLoader
from ga4_tracker.core.errors import InitializationError
from ga4_tracker.tracking.runtime import TrackingRuntime


def _sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_dispatch_counted(ready_runtime):
    before = _sample("ga4_events_dispatched_total", event_name="login", category="conversion")
    await ready_runtime.track_login("email")
    after = _sample("ga4_events_dispatched_total", event_name="login", category="conversion")
    assert after == before + 1


@pytest.mark.asyncio
async def test_not_ready_drop_counted(runtime):
    before = _sample("ga4_events_dropped_total", reason="not_ready")
    await runtime.track_login("email")
    assert _sample("ga4_events_dropped_total", reason="not_ready") == before + 1


@pytest.mark.asyncio
async def test_dispatch_error_counted(config):
    runtime = TrackingRuntime(config, loader=StaticLoader(MemoryReporter()))
    await runtime.init()
    runtime._manager.reporter.fail_with = RuntimeError("channel closed")
    before = _sample("ga4_dispatch_errors_total", event_name="sign_up")
    await runtime.track_sign_up("email")
    assert _sample("ga4_dispatch_errors_total", event_name="sign_up") == before + 1


@pytest.mark.asyncio
async def test_init_outcomes_counted(config):
    ok_before = _sample("ga4_init_attempts_total", outcome="success")
    fail_before = _sample("ga4_init_attempts_total", outcome="failure")

    await TrackingRuntime(config, loader=StaticLoader()).init()
    with pytest.raises(InitializationError):
        await TrackingRuntime(config, loader=StaticLoader(error=OSError("offline"))).init()

    assert _sample("ga4_init_attempts_total", outcome="success") == ok_before + 1
    assert _sample("ga4_init_attempts_total", outcome="failure") == fail_before + 1
