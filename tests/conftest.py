"""Shared fixtures for the ga4-tracker test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from ga4_tracker.backends.memory import MemoryReporter, StaticEnvironment, StaticLoader
from ga4_tracker.core.clock import ManualClock
from ga4_tracker.core.config import TrackerConfig
from ga4_tracker.core.models import EcommerceItem
from ga4_tracker.tracking.runtime import TrackingRuntime

MEASUREMENT_ID = "G-ABCDEF1234"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> TrackerConfig:
    return TrackerConfig(measurement_id=MEASUREMENT_ID)


@pytest.fixture
def debug_config() -> TrackerConfig:
    return TrackerConfig(measurement_id=MEASUREMENT_ID, debug=True)


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------

@pytest.fixture
def reporter() -> MemoryReporter:
    return MemoryReporter()


@pytest.fixture
def loader(reporter: MemoryReporter) -> StaticLoader:
    return StaticLoader(reporter)


@pytest.fixture
def environment() -> StaticEnvironment:
    return StaticEnvironment(
        path="https://shop.example.com/products",
        page_title="Products",
        page_referrer="https://www.example.com/",
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------

@pytest.fixture
def runtime(config, loader, environment, clock) -> TrackingRuntime:
    """A runtime that has not been initialized yet."""
    return TrackingRuntime(config, loader=loader, environment=environment, clock=clock)


@pytest_asyncio.fixture
async def ready_runtime(runtime: TrackingRuntime, reporter: MemoryReporter) -> TrackingRuntime:
    """An initialized runtime with bootstrap calls cleared from the reporter."""
    await runtime.init()
    reporter.clear()
    return runtime


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_item() -> EcommerceItem:
    return EcommerceItem(
        item_id="SKU_123",
        item_name="Trail Running Shoes",
        item_brand="Stride",
        item_category="Footwear",
        price=89.999,
        quantity=2,
    )


@pytest.fixture
def sample_items(sample_item) -> list:
    return [
        sample_item,
        {"item_id": "SKU_456", "item_name": "Socks", "price": 9.005},
    ]
