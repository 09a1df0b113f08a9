"""Pure validation predicates.

These are advisory checks for callers and tests.  Builders enforce their
own per-action contracts in ``tracking.runtime``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .constants import (
    CURRENCY_CODE_PATTERN,
    EMAIL_PATTERN,
    EVENT_NAME_PATTERN,
    MAX_EVENT_NAME_LENGTH,
    MAX_PARAMETER_NAME_LENGTH,
    MAX_PARAMETERS_PER_EVENT,
    MEASUREMENT_ID_PATTERN,
    PARAMETER_NAME_PATTERN,
    PHONE_PATTERN,
    URL_PATTERN,
)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None

    def __bool__(self) -> bool:
        return self.valid


_OK = ValidationResult(True)


def _matches(pattern, value: Any) -> bool:
    return isinstance(value, str) and pattern.fullmatch(value) is not None


def is_measurement_id_valid(measurement_id: Any) -> bool:
    """``G-`` followed by ten upper-case alphanumerics."""
    return _matches(MEASUREMENT_ID_PATTERN, measurement_id)


def is_currency_valid(code: Any) -> bool:
    """Three upper-case letters (ISO 4217 shape)."""
    return _matches(CURRENCY_CODE_PATTERN, code)


def is_event_name_valid(name: Any) -> ValidationResult:
    if not name or not isinstance(name, str):
        return ValidationResult(False, "Event name is required and must be a string")

    if len(name) > MAX_EVENT_NAME_LENGTH:
        return ValidationResult(
            False,
            f"Event name exceeds maximum length of {MAX_EVENT_NAME_LENGTH} characters",
        )

    if not EVENT_NAME_PATTERN.fullmatch(name):
        return ValidationResult(
            False,
            "Event name must start with a letter and contain only letters, "
            "numbers, and underscores",
        )

    return _OK


def is_parameter_count_valid(params: Mapping[str, Any] | None) -> ValidationResult:
    count = len(params or {})
    if count > MAX_PARAMETERS_PER_EVENT:
        return ValidationResult(
            False,
            f"Event parameters exceed maximum count of {MAX_PARAMETERS_PER_EVENT}",
        )
    return _OK


def is_parameter_name_valid(name: Any) -> ValidationResult:
    if not name or not isinstance(name, str):
        return ValidationResult(False, "Parameter name is required and must be a string")
    if len(name) > MAX_PARAMETER_NAME_LENGTH:
        return ValidationResult(
            False,
            f"Parameter name exceeds maximum length of {MAX_PARAMETER_NAME_LENGTH} characters",
        )
    if not PARAMETER_NAME_PATTERN.fullmatch(name):
        return ValidationResult(
            False,
            "Parameter name must start with a letter and contain only letters, "
            "numbers, and underscores",
        )
    return _OK


def is_email_valid(email: Any) -> bool:
    return _matches(EMAIL_PATTERN, email)


def is_phone_valid(phone: Any) -> bool:
    return _matches(PHONE_PATTERN, phone)


def is_url_valid(url: Any) -> bool:
    return _matches(URL_PATTERN, url)
