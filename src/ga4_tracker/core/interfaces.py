"""Protocol interfaces for the tracking runtime.

The reporting channel, the backend loader and the hosting environment are
external collaborators.  The runtime depends on them through these
protocols only, so hosts and tests can swap implementations freely.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .config import TrackerConfig


# ---------------------------------------------------------------------------
# Reporting channel
# ---------------------------------------------------------------------------

@runtime_checkable
class IReporter(Protocol):
    """The global reporting function, ``gtag(command, target, payload)``.

    Commands used by the runtime: ``"js"``, ``"config"``, ``"consent"``
    and ``"event"``.
    """

    def report(
        self, command: str, target: Any, payload: dict[str, Any] | None = None,
    ) -> None: ...


# ---------------------------------------------------------------------------
# Backend loader
# ---------------------------------------------------------------------------

@runtime_checkable
class IBackendLoader(Protocol):
    """Loads the reporting backend and returns a callable reporting channel.

    Raises on failure; the initialization manager wraps the cause.
    """

    async def load(self, config: TrackerConfig) -> IReporter: ...


# ---------------------------------------------------------------------------
# Hosting environment
# ---------------------------------------------------------------------------

@runtime_checkable
class IHostEnvironment(Protocol):
    """Environment queries consumed, not owned, by the runtime."""

    def location(self) -> str | None: ...

    def title(self) -> str | None: ...

    def referrer(self) -> str | None: ...

    def find_reporter(self) -> IReporter | None:
        """Return a reporter installed outside the runtime, if any."""
        ...


class NullEnvironment:
    """No hosting document: nothing resolvable, no pre-installed reporter."""

    def location(self) -> str | None:
        return None

    def title(self) -> str | None:
        return None

    def referrer(self) -> str | None:
        return None

    def find_reporter(self) -> IReporter | None:
        return None
