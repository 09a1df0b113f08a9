"""Initialization state machine for the reporting backend.

Owns the single ``InitializationState`` of a runtime.  ``init()`` loads the
backend at most once at a time: while a load is in flight every caller
gets the same task, so all of them observe one outcome.  State is only
written from the event loop thread, which gives single-writer semantics
without a lock.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable

from ga4_tracker.backends.batching import BatchingReporter
from ga4_tracker.core.clock import IClock, SystemClock
from ga4_tracker.core.config import TrackerConfig
from ga4_tracker.core.enums import InitializationState
from ga4_tracker.core.errors import ConfigError, InitializationError
from ga4_tracker.core.interfaces import (
    IBackendLoader,
    IHostEnvironment,
    IReporter,
    NullEnvironment,
)
from ga4_tracker.core.validation import is_measurement_id_valid
from ga4_tracker.observability.metrics import record_init

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Valid state transitions
# ---------------------------------------------------------------------------

_VALID_TRANSITIONS: dict[InitializationState, frozenset[InitializationState]] = {
    InitializationState.NOT_INITIALIZED: frozenset({InitializationState.INITIALIZING}),
    InitializationState.INITIALIZING: frozenset(
        {InitializationState.INITIALIZED, InitializationState.FAILED}
    ),
    # FAILED restarts the same path as NOT_INITIALIZED
    InitializationState.FAILED: frozenset({InitializationState.INITIALIZING}),
    # Terminal until destroy()
    InitializationState.INITIALIZED: frozenset(),
}


class InitializationManager:
    """Lifecycle bookkeeping for one reporting backend.

    Parameters
    ----------
    config:
        Frozen tracker configuration.
    loader:
        Loads the backend and returns the reporting channel.
    environment:
        Host queries; ``find_reporter()`` covers a backend installed
        outside this runtime.
    clock:
        Source of the ``"js"`` bootstrap timestamp.
    """

    def __init__(
        self,
        config: TrackerConfig,
        loader: IBackendLoader,
        environment: IHostEnvironment | None = None,
        *,
        clock: IClock | None = None,
    ) -> None:
        self._config = config
        self._loader = loader
        self._environment = environment or NullEnvironment()
        self._clock = clock or SystemClock()

        self._state = InitializationState.NOT_INITIALIZED
        self._task: asyncio.Task[None] | None = None
        self._reporter: IReporter | None = None
        # Bumped by destroy(); a load only commits if its generation is current
        self._generation = 0

    # -- state --------------------------------------------------------------

    @property
    def state(self) -> InitializationState:
        return self._state

    @property
    def pending(self) -> asyncio.Task[None] | None:
        """The in-flight load, if any."""
        return self._task

    @property
    def reporter(self) -> IReporter | None:
        """The callable reporting channel, or ``None`` when not ready."""
        if self._state == InitializationState.INITIALIZED:
            return self._reporter
        return self._environment.find_reporter()

    def is_initialized(self) -> bool:
        return (
            self._state == InitializationState.INITIALIZED
            or self._environment.find_reporter() is not None
        )

    def is_ready(self) -> bool:
        return self._config.disable_ga or self.is_initialized()

    def _transition(self, target: InitializationState) -> None:
        if target not in _VALID_TRANSITIONS[self._state]:
            raise RuntimeError(
                f"Invalid initialization transition {self._state.value} -> {target.value}"
            )
        logger.debug("GA4 init state %s -> %s", self._state.value, target.value)
        self._state = target

    # -- lifecycle ----------------------------------------------------------

    def init(self) -> Awaitable[None]:
        """Start loading the backend, or join the load already in flight.

        Must be called from a running event loop.  Returns an awaitable that
        resolves when the backend is ready and raises
        :class:`InitializationError` if the load fails.
        """
        loop = asyncio.get_running_loop()

        if self._config.disable_ga or self.is_initialized():
            done = loop.create_future()
            done.set_result(None)
            return done

        if self._state == InitializationState.INITIALIZING and self._task is not None:
            return self._task

        if not is_measurement_id_valid(self._config.measurement_id):
            raise ConfigError(
                f"Invalid GA4 measurement id {self._config.measurement_id!r}. "
                "Expected format: G-XXXXXXXXXX"
            )

        self._transition(InitializationState.INITIALIZING)
        task = loop.create_task(self._load(self._generation), name="ga4-init")
        task.add_done_callback(self._on_load_done)
        self._task = task
        return task

    async def _load(self, generation: int) -> None:
        try:
            reporter = await asyncio.wait_for(
                self._loader.load(self._config),
                timeout=self._config.load_timeout,
            )
            reporter = await self._install(reporter)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._transition(InitializationState.FAILED)
                self._task = None
            raise
        except Exception as exc:
            record_init("failure")
            logger.error("GA4 initialization failed: %s", exc)
            if generation == self._generation:
                self._transition(InitializationState.FAILED)
                self._task = None
            raise InitializationError(exc) from exc

        if generation != self._generation:
            # destroy() ran while loading; the result is not retained
            logger.debug("GA4 init finished after destroy(); discarding reporter")
            if isinstance(reporter, BatchingReporter):
                await reporter.stop()
            return

        self._reporter = reporter
        self._transition(InitializationState.INITIALIZED)
        self._task = None
        record_init("success")
        logger.info("GA4 initialized (measurement_id=%s)", self._config.measurement_id)

    async def _install(self, reporter: IReporter) -> IReporter:
        """Send the bootstrap commands and wrap in a batcher if configured."""
        config = self._config

        reporter.report("js", self._clock.now())

        settings: dict[str, object] = {"transport_type": config.transport.value}
        if config.debug:
            settings["debug_mode"] = True
        reporter.report("config", config.measurement_id, settings)

        if config.custom_config:
            reporter.report("consent", "default", dict(config.custom_config))

        if config.batching.enabled:
            batcher = BatchingReporter(reporter, config.batching)
            await batcher.start()
            return batcher
        return reporter

    @staticmethod
    def _on_load_done(task: asyncio.Task[None]) -> None:
        # Failures are logged in _load and re-raised to awaiting callers;
        # retrieving here keeps dropped handles from warning at GC time.
        if not task.cancelled():
            task.exception()

    def destroy(self) -> None:
        """Reset to NOT_INITIALIZED without waiting for an in-flight load."""
        self._generation += 1
        if isinstance(self._reporter, BatchingReporter):
            self._reporter.cancel()
        self._reporter = None
        self._task = None
        self._state = InitializationState.NOT_INITIALIZED

    async def aclose(self) -> None:
        """Flush a batching reporter, then destroy."""
        if isinstance(self._reporter, BatchingReporter):
            await self._reporter.stop()
        self.destroy()
