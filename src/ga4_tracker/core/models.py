"""Value types passed between the builder layer and the dispatch boundary.

``EcommerceItem`` is a Pydantic model so caller input is validated the
same way configuration is.  ``CanonicalEvent`` and the option records are
frozen dataclasses: built once per call, never mutated, then discarded.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict

from .enums import EventCategory, Transport
from .errors import InvalidArgumentError


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------

class EcommerceItem(BaseModel):
    """A single line item.

    Only ``price`` is required.  Unknown keys are kept so custom item
    dimensions reach the backend untouched.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    item_id: str | None = None
    item_name: str | None = None
    price: float
    quantity: int | None = None

    affiliation: str | None = None
    coupon: str | None = None
    currency: str | None = None
    discount: float | None = None
    index: int | None = None
    item_brand: str | None = None
    item_category: str | None = None
    item_category2: str | None = None
    item_category3: str | None = None
    item_category4: str | None = None
    item_category5: str | None = None
    item_list_id: str | None = None
    item_list_name: str | None = None
    item_variant: str | None = None
    location_id: str | None = None
    promotion_id: str | None = None
    promotion_name: str | None = None


# Alias kept for call sites that talk about cart contents
CartItem = EcommerceItem


# ---------------------------------------------------------------------------
# Canonical event
# ---------------------------------------------------------------------------

class _FrozenList(tuple):
    """Read-only stand-in for a list, so thawing can give a list back."""


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return _FrozenList(_freeze(v) for v in value)
    if isinstance(value, tuple):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, _FrozenList):
        return [_thaw(v) for v in value]
    if isinstance(value, tuple):
        return tuple(_thaw(v) for v in value)
    return value


@dataclass(frozen=True)
class CanonicalEvent:
    """Normalized representation of one trackable action.

    Compared by value but not hashable: the parameter bag is a read-only
    mapping.
    """

    event_name: str
    event_parameters: Mapping[str, Any] = field(default_factory=dict)
    event_category: EventCategory = EventCategory.CUSTOM
    timestamp: int | None = None  # epoch ms

    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        object.__setattr__(self, "event_parameters", _freeze(self.event_parameters))

    def parameters_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy of the parameter bag."""
        return _thaw(self.event_parameters)


# ---------------------------------------------------------------------------
# Per-call options
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrackingOptions:
    """Per-call overrides applied at dispatch time.

    ``immediate`` asks a batching reporter to flush right away;
    ``force_track`` is advisory.  ``transport`` accepts a :class:`Transport`
    or its string value.
    """

    custom_parameters: Mapping[str, Any] | None = None
    on_error: Callable[[Exception], Any] | None = None
    debug: bool = False
    transport: Transport | None = None
    immediate: bool = False
    force_track: bool = False

    def __post_init__(self) -> None:
        if self.transport is not None:
            try:
                transport = Transport(self.transport)
            except ValueError as exc:
                raise InvalidArgumentError(
                    f"GA4: Unsupported transport {self.transport!r}"
                ) from exc
            object.__setattr__(self, "transport", transport)

