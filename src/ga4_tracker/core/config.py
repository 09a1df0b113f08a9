"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding
(``GA4_MEASUREMENT_ID``, ``GA4_BATCHING__ENABLED``, ...).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_BATCH_TIMEOUT_MS,
    DEFAULT_CURRENCY,
    DEFAULT_MAX_QUEUE_SIZE,
    DEFAULT_MAX_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY_MS,
    GTAG_SCRIPT_URL,
)
from .enums import Transport


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class BatchingConfig(BaseModel):
    enabled: bool = False
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)
    batch_timeout_ms: int = Field(default=DEFAULT_BATCH_TIMEOUT_MS, ge=1)
    max_retry_attempts: int = Field(default=DEFAULT_MAX_RETRY_ATTEMPTS, ge=1)
    retry_delay_ms: int = Field(default=DEFAULT_RETRY_DELAY_MS, ge=0)
    max_queue_size: int = Field(default=DEFAULT_MAX_QUEUE_SIZE, ge=1)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

class TrackerConfig(BaseSettings):
    """Tracker configuration.

    Constructed once, frozen, and owned by a single ``TrackingRuntime``.
    Shape checks that depend on ``disable_ga`` happen in the runtime so a
    disabled tracker can be built from an empty config.
    """

    measurement_id: str = ""
    debug: bool = False
    currency: str = DEFAULT_CURRENCY
    disable_ga: bool = False  # Bypass validation and dispatch entirely

    # Opaque bag forwarded to the "consent" command
    custom_config: dict[str, Any] = Field(default_factory=dict)

    transport: Transport = Transport.BEACON
    script_url: str = GTAG_SCRIPT_URL
    load_timeout: float = 10.0  # seconds

    batching: BatchingConfig = Field(default_factory=BatchingConfig)

    model_config = {
        "env_prefix": "GA4_",
        "env_nested_delimiter": "__",
        "frozen": True,
    }


def load_config(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> TrackerConfig:
    """Load tracker config from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        data.update(overrides)

    return TrackerConfig(**data)
