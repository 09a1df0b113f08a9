"""Property test: initialization lifecycle invariants.

Drives a runtime through random sequences of successful loads, failing
loads, concurrent init() calls, destroy() and dispatch, and checks after
every step that the state, readiness and delivered events agree.
"""

import asyncio

from hypothesis import given, settings, strategies as st

from ga4_tracker.backends.memory import MemoryReporter, StaticLoader
from ga4_tracker.core.config import TrackerConfig
from ga4_tracker.core.enums import InitializationState
from ga4_tracker.core.errors import InitializationError
from ga4_tracker.tracking.runtime import TrackingRuntime

OPERATIONS = ["init_ok", "init_fail", "init_pair", "destroy", "track"]


async def _run(operations: list[str]) -> None:
    reporter = MemoryReporter()
    loader = StaticLoader(reporter)
    runtime = TrackingRuntime(TrackerConfig(measurement_id="G-ABCDEF1234"), loader=loader)

    for op in operations:
        was_initialized = runtime.state == InitializationState.INITIALIZED
        loads_before = loader.load_count

        if op == "init_ok":
            loader.error = None
            await runtime.init()
            assert runtime.state == InitializationState.INITIALIZED
            assert loader.load_count == loads_before + (0 if was_initialized else 1)

        elif op == "init_fail":
            loader.error = ConnectionError("blocked")
            if was_initialized:
                await runtime.init()
                assert runtime.state == InitializationState.INITIALIZED
            else:
                try:
                    await runtime.init()
                except InitializationError:
                    pass
                else:
                    raise AssertionError("init() should have failed")
                assert runtime.state == InitializationState.FAILED

        elif op == "init_pair":
            loader.error = None
            first = runtime.init()
            second = runtime.init()
            if not was_initialized:
                assert first is second
            await asyncio.gather(first, second)
            assert loader.load_count == loads_before + (0 if was_initialized else 1)

        elif op == "destroy":
            runtime.destroy()
            assert runtime.state == InitializationState.NOT_INITIALIZED

        elif op == "track":
            sent_before = len(reporter.events())
            await runtime.track_login("email")
            delivered = len(reporter.events()) - sent_before
            assert delivered == (1 if was_initialized else 0)

        assert runtime.is_ready() == (runtime.state == InitializationState.INITIALIZED)
        assert runtime.state != InitializationState.INITIALIZING


@given(operations=st.lists(st.sampled_from(OPERATIONS), min_size=1, max_size=12))
@settings(max_examples=100, deadline=None)
def test_random_lifecycle_sequences(operations):
    asyncio.run(_run(operations))


@given(operations=st.lists(st.sampled_from(OPERATIONS), min_size=1, max_size=12))
@settings(max_examples=50, deadline=None)
def test_bootstrap_sent_once_per_successful_load(operations):
    async def scenario() -> None:
        reporter = MemoryReporter()
        loader = StaticLoader(reporter)
        runtime = TrackingRuntime(
            TrackerConfig(measurement_id="G-ABCDEF1234"), loader=loader,
        )
        successful_loads = 0
        for op in operations:
            before = runtime.state
            if op in ("init_ok", "init_pair"):
                loader.error = None
                await runtime.init()
                if before != InitializationState.INITIALIZED:
                    successful_loads += 1
            elif op == "init_fail":
                loader.error = ConnectionError("blocked")
                try:
                    await runtime.init()
                except InitializationError:
                    pass
            elif op == "destroy":
                runtime.destroy()
            else:
                await runtime.track_login("email")
        configs = [c for c in reporter.calls if c.command == "config"]
        assert len(configs) == successful_loads

    asyncio.run(scenario())
