"""Numeric and line-item normalization shared by the e-commerce builders.

Rounding is half-up on the decimal representation, so ``9.005`` becomes
``9.01`` rather than the binary-float ``9.0``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Union

from pydantic import ValidationError

from ga4_tracker.core.constants import MAX_QUANTITY, MIN_QUANTITY
from ga4_tracker.core.errors import InvalidArgumentError
from ga4_tracker.core.models import EcommerceItem

ItemInput = Union[EcommerceItem, Mapping[str, Any]]

_CENTS = Decimal("0.01")
_UNITS = Decimal("1")


def to_decimal(value: Any, field: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidArgumentError(f"GA4: {field} must be a number, got bool")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidArgumentError(f"GA4: {field} must be a number, got {value!r}") from exc
    if not result.is_finite():
        raise InvalidArgumentError(f"GA4: {field} must be finite, got {value!r}")
    return result


def round_money(value: Any, field: str = "value") -> float:
    """Round to two decimal places, half-up."""
    return float(to_decimal(value, field).quantize(_CENTS, rounding=ROUND_HALF_UP))


def round_whole(value: Any, field: str = "value") -> int:
    """Round to the nearest integer, half-up."""
    return int(to_decimal(value, field).quantize(_UNITS, rounding=ROUND_HALF_UP))


def coerce_item(item: ItemInput) -> EcommerceItem:
    if isinstance(item, EcommerceItem):
        return item
    try:
        return EcommerceItem.model_validate(item)
    except ValidationError as exc:
        raise InvalidArgumentError(f"GA4: Invalid item {item!r}: {exc}") from exc


def normalize_item(item: ItemInput) -> dict[str, Any]:
    """Default quantity to 1, round price; pass every other field through."""
    model = coerce_item(item)
    data = model.model_dump(exclude_none=True)
    quantity = model.quantity or 1
    if quantity < MIN_QUANTITY:
        raise InvalidArgumentError(f"GA4: Item quantity must be positive, got {quantity}")
    if quantity > MAX_QUANTITY:
        raise InvalidArgumentError(
            f"GA4: Item quantity exceeds maximum of {MAX_QUANTITY}, got {quantity}"
        )
    data["quantity"] = quantity
    data["price"] = round_money(model.price, "price")
    return data


def normalize_items(items: Iterable[ItemInput] | None) -> list[dict[str, Any]]:
    return [normalize_item(item) for item in items or ()]
