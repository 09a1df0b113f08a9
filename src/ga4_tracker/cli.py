"""CLI entry point for the tracking runtime."""

from __future__ import annotations

import json
import sys

import click

from .core.enums import EventCategory
from .core.errors import TrackingError


@click.group()
@click.option("--log-level", default="WARNING", help="Log level")
@click.option("--log-format", default="console", type=click.Choice(["json", "console"]))
def main(log_level: str, log_format: str) -> None:
    """GA4 tracking runtime."""
    from .observability.logger import setup_logging

    setup_logging(level=log_level, format=log_format)


@main.command()
@click.option("--measurement-id", default=None, help="GA4 measurement id (G-XXXXXXXXXX)")
@click.option("--currency", default=None, help="ISO 4217 currency code")
@click.option("--event-name", default=None, help="Event name")
def validate(measurement_id: str | None, currency: str | None, event_name: str | None) -> None:
    """Check identifiers against the GA4 format rules."""
    from .core.validation import (
        is_currency_valid,
        is_event_name_valid,
        is_measurement_id_valid,
    )

    failed = False
    if measurement_id is not None:
        ok = is_measurement_id_valid(measurement_id)
        failed |= not ok
        click.echo(f"measurement_id {measurement_id}: {'ok' if ok else 'invalid'}")
    if currency is not None:
        ok = is_currency_valid(currency)
        failed |= not ok
        click.echo(f"currency {currency}: {'ok' if ok else 'invalid'}")
    if event_name is not None:
        result = is_event_name_valid(event_name)
        failed |= not result.valid
        click.echo(f"event_name {event_name}: {'ok' if result.valid else result.error}")

    if failed:
        sys.exit(1)


def _parse_params(raw: tuple[str, ...]) -> dict[str, str]:
    params: dict[str, str] = {}
    for item in raw:
        key, sep, value = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected key=value, got {item!r}", param_hint="--param")
        params[key] = value
    return params


@main.command()
@click.option("--config", "config_path", default=None, help="Config file path (TOML)")
@click.option("--measurement-id", default=None, help="Override measurement id")
@click.option("--event", "event_name", required=True, help="Event name to send")
@click.option("--param", "params", multiple=True, help="Event parameter as key=value")
@click.option(
    "--category",
    default=EventCategory.CUSTOM.value,
    type=click.Choice([c.value for c in EventCategory]),
)
def send(
    config_path: str | None,
    measurement_id: str | None,
    event_name: str,
    params: tuple[str, ...],
    category: str,
) -> None:
    """Load gtag, send one custom event and print the data layer."""
    import asyncio

    from .backends.gtag import GtagLoader
    from .core.config import load_config
    from .observability.logger import bind_session
    from .tracking.runtime import TrackingRuntime

    overrides = {"measurement_id": measurement_id} if measurement_id else None
    event_params = _parse_params(params)
    config = load_config(config_path, overrides)
    loader = GtagLoader()
    bind_session(measurement_id=config.measurement_id)

    async def _run() -> None:
        async with TrackingRuntime(config, loader=loader) as runtime:
            await runtime.track_custom_event(
                event_name, event_params, category=EventCategory(category),
            )

    try:
        asyncio.run(_run())
    except TrackingError as exc:
        raise click.ClickException(str(exc)) from exc
    for entry in loader.data_layer:
        click.echo(json.dumps(entry, default=str))


if __name__ == "__main__":
    main()
