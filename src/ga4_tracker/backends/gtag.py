"""gtag backend: script fetch plus an in-process data layer.

``GtagLoader`` fetches ``https://www.googletagmanager.com/gtag/js?id=...``
with ``httpx``; a 2xx response counts as a successful load.  The reporter
it installs is a ``DataLayerReporter``, the Python counterpart of
``window.gtag`` pushing its arguments onto ``window.dataLayer``.

Usage::

    runtime = TrackingRuntime(config, loader=GtagLoader())
    await runtime.init()
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ga4_tracker.core.config import TrackerConfig

logger = logging.getLogger(__name__)


class DataLayerReporter:
    """Appends every ``report()`` call to a shared data layer list."""

    def __init__(self, data_layer: list[list[Any]] | None = None) -> None:
        self.data_layer: list[list[Any]] = data_layer if data_layer is not None else []

    def report(
        self, command: str, target: Any, payload: dict[str, Any] | None = None,
    ) -> None:
        entry: list[Any] = [command, target]
        if payload is not None:
            entry.append(payload)
        self.data_layer.append(entry)


class GtagLoader:
    """Loads the gtag script and returns a :class:`DataLayerReporter`.

    Parameters
    ----------
    client:
        Optional shared ``httpx.AsyncClient``.  When omitted a short-lived
        client is created per load, bounded by ``config.load_timeout``.
    data_layer:
        List the installed reporter pushes onto.  Share it with whatever
        drains the layer.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        data_layer: list[list[Any]] | None = None,
    ) -> None:
        self._client = client
        self._data_layer = data_layer if data_layer is not None else []
        self._load_count = 0

    @property
    def data_layer(self) -> list[list[Any]]:
        return self._data_layer

    @property
    def load_count(self) -> int:
        return self._load_count

    async def load(self, config: TrackerConfig) -> DataLayerReporter:
        url = config.script_url.format(measurement_id=config.measurement_id)
        self._load_count += 1

        if self._client is not None:
            resp = await self._client.get(url)
        else:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(config.load_timeout),
                follow_redirects=True,
            ) as client:
                resp = await client.get(url)

        if resp.status_code >= 400:
            raise httpx.HTTPStatusError(
                f"Failed to load Google Analytics script: HTTP {resp.status_code}",
                request=resp.request,
                response=resp,
            )

        logger.info("Loaded gtag script from %s (%d bytes)", url, len(resp.content))
        return DataLayerReporter(self._data_layer)
