"""TrackingRuntime: the public tracking surface.

One long-lived instance per page/session.  Every ``track_*`` builder
follows the same shape::

    validate required inputs -> normalize -> merge custom params
        -> EventFactory.build -> dispatch

Invalid arguments raise :class:`InvalidArgumentError` before anything is
dispatched.  Dispatch itself never raises: a reporter that is not ready
drops the event, and a reporter that throws is logged and handed to the
caller's ``on_error`` callback on the next loop iteration.

Usage::

    runtime = TrackingRuntime(TrackerConfig(measurement_id="G-ABCDEF1234"))
    await runtime.init()
    await runtime.track_purchase(transaction_id="ORDER_1", value=25.5, items=[...])
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from enum import Enum
from typing import Any, TypeVar

from ga4_tracker.backends.batching import BatchingReporter
from ga4_tracker.core.clock import IClock
from ga4_tracker.core.config import TrackerConfig
from ga4_tracker.core.constants import GAEvents, GAParams
from ga4_tracker.core.enums import (
    CartAction,
    EventCategory,
    InitializationState,
    ItemAction,
    PromotionAction,
    VideoAction,
    WishlistAction,
)
from ga4_tracker.core.errors import (
    ConfigError,
    DispatchError,
    InvalidArgumentError,
    UnsupportedActionError,
)
from ga4_tracker.core.interfaces import IBackendLoader, IHostEnvironment, NullEnvironment
from ga4_tracker.core.models import CanonicalEvent, TrackingOptions
from ga4_tracker.core.validation import (
    is_currency_valid,
    is_event_name_valid,
    is_parameter_count_valid,
)
from ga4_tracker.observability.metrics import record_dispatch, record_dispatch_error, record_drop
from ga4_tracker.tracking.factory import EventFactory
from ga4_tracker.tracking.initialization import InitializationManager
from ga4_tracker.tracking.normalize import (
    ItemInput,
    normalize_items,
    round_money,
    round_whole,
    to_decimal,
)

logger = logging.getLogger(__name__)

Params = Mapping[str, Any]
_E = TypeVar("_E", bound=Enum)

_NO_OPTIONS = TrackingOptions()


def _resolve_action(enum_cls: type[_E], action: Any, family: str) -> _E:
    try:
        return enum_cls(action)
    except ValueError:
        raise UnsupportedActionError(family, action) from None


def _require_items(items: Iterable[ItemInput] | None, action: str) -> list[ItemInput]:
    items = list(items or ())
    if not items:
        raise InvalidArgumentError(f"GA4: Cannot track {action} with empty items")
    return items


def _require_value(value: Any, action: str) -> float:
    if value is None or to_decimal(value, "value") == 0:
        raise InvalidArgumentError(f"GA4: Cannot track {action} without value")
    return round_money(value)


def _invoke_on_error(callback: Callable[[Exception], Any], error: Exception) -> None:
    try:
        result = callback(error)
        if inspect.isawaitable(result):
            asyncio.ensure_future(result)
    except Exception:
        logger.warning("GA4: on_error callback failed", exc_info=True)


class TrackingRuntime:
    """Builds canonical events for domain actions and dispatches them.

    Parameters
    ----------
    config:
        Tracker configuration, or a mapping of its fields.
    loader:
        Backend loader used by :meth:`init`.  Defaults to
        :class:`~ga4_tracker.backends.gtag.GtagLoader`.
    environment:
        Host queries for page-view fallbacks and pre-installed reporters.
    clock:
        Source of event timestamps.
    """

    def __init__(
        self,
        config: TrackerConfig | Mapping[str, Any],
        *,
        loader: IBackendLoader | None = None,
        environment: IHostEnvironment | None = None,
        clock: IClock | None = None,
    ) -> None:
        if not isinstance(config, TrackerConfig):
            config = TrackerConfig(**config)
        self._config = config
        self._validate_config()

        if loader is None:
            from ga4_tracker.backends.gtag import GtagLoader

            loader = GtagLoader()

        self._environment = environment or NullEnvironment()
        self._factory = EventFactory(clock)
        self._manager = InitializationManager(
            config, loader, self._environment, clock=clock,
        )

    def _validate_config(self) -> None:
        if self._config.disable_ga:
            return
        if not self._config.measurement_id.strip():
            raise ConfigError("GA4 measurementId is required")
        if not is_currency_valid(self._config.currency):
            raise ConfigError(
                f"Invalid currency code {self._config.currency!r}. "
                "Must be a 3-letter ISO 4217 code"
            )

    # ==================================================================
    # Lifecycle
    # ==================================================================

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def state(self) -> InitializationState:
        return self._manager.state

    def init(self) -> Awaitable[None]:
        """Load the backend once; concurrent callers share one load."""
        return self._manager.init()

    def is_ready(self) -> bool:
        return self._manager.is_ready()

    def is_initialized(self) -> bool:
        return self._manager.is_initialized()

    def destroy(self) -> None:
        self._manager.destroy()

    async def aclose(self) -> None:
        await self._manager.aclose()

    async def __aenter__(self) -> TrackingRuntime:
        await self.init()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ==================================================================
    # Dispatch
    # ==================================================================

    def _debug(self, options: TrackingOptions) -> bool:
        return self._config.debug or options.debug

    async def track_event(
        self, event: CanonicalEvent, options: TrackingOptions | None = None,
    ) -> None:
        """Hand a canonical event to the reporting channel if it is ready."""
        opts = options or _NO_OPTIONS
        if self._config.disable_ga:
            return

        reporter = self._manager.reporter
        if reporter is None:
            record_drop("not_ready")
            if self._debug(opts):
                logger.warning("GA4: reporter not ready, dropping %s", event.event_name)
            return

        payload = event.parameters_dict()
        if opts.custom_parameters:
            payload.update(opts.custom_parameters)
        if event.timestamp is not None:
            payload[GAParams.EVENT_TIMESTAMP] = event.timestamp
        if opts.transport is not None:
            payload["transport_type"] = opts.transport.value
        if opts.debug:
            payload["debug_mode"] = True

        try:
            reporter.report("event", event.event_name, payload)
        except Exception as exc:
            record_dispatch_error(event.event_name)
            logger.exception("GA4: Error tracking event %s", event.event_name)
            if opts.on_error is not None:
                error = DispatchError(event.event_name, exc)
                error.__cause__ = exc
                asyncio.get_running_loop().call_soon(_invoke_on_error, opts.on_error, error)
            return

        record_dispatch(event.event_name, event.event_category.value)
        if opts.immediate and isinstance(reporter, BatchingReporter):
            reporter.request_flush()
        if self._debug(opts):
            logger.debug("GA4: tracked %s %s", event.event_name, payload)

    async def _emit(
        self,
        name: str,
        params: Params,
        category: EventCategory,
        options: TrackingOptions | None,
    ) -> None:
        await self.track_event(self._factory.build(name, params, category), options)

    # ==================================================================
    # Navigation & engagement
    # ==================================================================

    async def track_page(
        self,
        *,
        path: str | None = None,
        title: str | None = None,
        referrer: str | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        """Track a page view; skipped when no path can be resolved."""
        env = self._environment
        page_location = path if path is not None else env.location()
        if not page_location:
            if self._config.debug:
                logger.warning("GA4: Cannot track page view without path")
            return

        params = {
            GAParams.PAGE_TITLE: title if title is not None else (env.title() or ""),
            GAParams.PAGE_LOCATION: page_location,
            GAParams.PAGE_REFERRER: referrer if referrer is not None else (env.referrer() or ""),
            **(custom_params or {}),
        }
        await self._emit(GAEvents.PAGE_VIEW, params, EventCategory.ENGAGEMENT, options)

    async def track_search(
        self,
        search_term: str,
        *,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        if not isinstance(search_term, str) or not search_term.strip():
            if self._config.debug:
                logger.warning("GA4: Search term is required")
            return
        params = {GAParams.SEARCH_TERM: search_term.strip(), **(custom_params or {})}
        await self._emit(GAEvents.SEARCH, params, EventCategory.ENGAGEMENT, options)

    async def track_engagement(
        self,
        engagement_type: str,
        *,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        params = {GAParams.ENGAGEMENT_TYPE: engagement_type, **(custom_params or {})}
        await self._emit(GAEvents.USER_ENGAGEMENT, params, EventCategory.ENGAGEMENT, options)

    async def track_custom_event(
        self,
        event_name: str,
        params: Params | None = None,
        *,
        category: EventCategory = EventCategory.CUSTOM,
        options: TrackingOptions | None = None,
    ) -> None:
        if self._config.debug:
            for check in (is_event_name_valid(event_name), is_parameter_count_valid(params)):
                if not check:
                    logger.warning("GA4: custom event %r: %s", event_name, check.error)
        await self._emit(event_name, dict(params or {}), EventCategory(category), options)

    # ==================================================================
    # Auth & sharing
    # ==================================================================

    async def track_login(
        self,
        method: str,
        *,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        params = {GAParams.METHOD: method, **(custom_params or {})}
        await self._emit(GAEvents.LOGIN, params, EventCategory.CONVERSION, options)

    async def track_sign_up(
        self,
        method: str,
        *,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        params = {GAParams.METHOD: method, **(custom_params or {})}
        await self._emit(GAEvents.SIGN_UP, params, EventCategory.CONVERSION, options)

    async def track_share(
        self,
        *,
        content_type: str,
        content_id: str,
        method: str,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        params = {
            GAParams.CONTENT_TYPE: content_type,
            GAParams.CONTENT_ID: content_id,
            GAParams.METHOD: method,
            **(custom_params or {}),
        }
        await self._emit(GAEvents.SHARE, params, EventCategory.ENGAGEMENT, options)

    async def track_select_content(
        self,
        *,
        content_type: str,
        content_id: str,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        params = {
            GAParams.CONTENT_TYPE: content_type,
            GAParams.CONTENT_ID: content_id,
            **(custom_params or {}),
        }
        await self._emit(GAEvents.SELECT_CONTENT, params, EventCategory.INTERACTION, options)

    # ==================================================================
    # Media, errors, performance
    # ==================================================================

    async def track_video(
        self,
        action: VideoAction | str = VideoAction.START,
        *,
        title: str,
        url: str,
        duration: float | None = None,
        current_time: float | None = None,
        percent: float | None = None,
        provider: str | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        video_action = _resolve_action(VideoAction, action, "video")
        if video_action == VideoAction.PROGRESS and (current_time is None or percent is None):
            raise InvalidArgumentError(
                "GA4: Cannot track video_progress without current_time and percent"
            )

        params: dict[str, Any] = {GAParams.VIDEO_TITLE: title, GAParams.VIDEO_URL: url}
        if duration:
            params[GAParams.VIDEO_DURATION] = duration
        if current_time is not None:
            params[GAParams.VIDEO_CURRENT_TIME] = current_time
        if percent is not None:
            params[GAParams.VIDEO_PERCENT] = percent
        if provider:
            params["video_provider"] = provider
        params.update(custom_params or {})
        await self._emit(video_action.value, params, EventCategory.ENGAGEMENT, options)

    async def track_exception(
        self,
        description: str,
        *,
        fatal: bool = False,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        params = {GAParams.DESCRIPTION: description, GAParams.FATAL: fatal, **(custom_params or {})}
        await self._emit(GAEvents.EXCEPTION, params, EventCategory.ERROR, options)

    async def track_timing(
        self,
        *,
        category: str,
        variable: str,
        value: float,
        label: str | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        params: dict[str, Any] = {
            "name": variable,
            GAParams.VALUE: round_whole(value),
            "event_category": category,
        }
        if label:
            params["event_label"] = label
        params.update(custom_params or {})
        await self._emit(GAEvents.TIMING_COMPLETE, params, EventCategory.PERFORMANCE, options)

    # ==================================================================
    # E-commerce: items, cart, wishlist
    # ==================================================================

    async def track_item(
        self,
        action: ItemAction | str,
        *,
        items: Iterable[ItemInput],
        item_list_id: str | None = None,
        item_list_name: str | None = None,
        value: float | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        """view_item attaches currency/value; list actions attach list id/name.

        The attached fields are applied after ``custom_params``.
        """
        item_action = _resolve_action(ItemAction, action, "item")
        items = _require_items(items, item_action.value)

        params: dict[str, Any] = {
            GAParams.ITEMS: normalize_items(items),
            **(custom_params or {}),
        }
        if item_action == ItemAction.VIEW_ITEM:
            params[GAParams.CURRENCY] = self._config.currency
            if value is not None:
                params[GAParams.VALUE] = round_money(value)
        else:
            if item_list_id is not None:
                params[GAParams.ITEM_LIST_ID] = item_list_id
            if item_list_name is not None:
                params[GAParams.ITEM_LIST_NAME] = item_list_name

        await self._emit(item_action.value, params, EventCategory.ECOMMERCE, options)

    def _priced_items_params(
        self, items: list[ItemInput], value: float, extra: Params, custom_params: Params | None,
    ) -> dict[str, Any]:
        return {
            GAParams.CURRENCY: self._config.currency,
            GAParams.VALUE: value,
            GAParams.ITEMS: normalize_items(items),
            **extra,
            **(custom_params or {}),
        }

    async def track_cart(
        self,
        action: CartAction | str,
        *,
        items: Iterable[ItemInput],
        value: float,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        cart_action = _resolve_action(CartAction, action, "cart")
        items = _require_items(items, cart_action.value)
        rounded = _require_value(value, cart_action.value)

        params = self._priced_items_params(items, rounded, {}, custom_params)
        await self._emit(cart_action.value, params, EventCategory.ECOMMERCE, options)

    async def track_wishlist(
        self,
        action: WishlistAction | str,
        *,
        items: Iterable[ItemInput],
        value: float,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        """Like :meth:`track_cart`, except a zero value is accepted."""
        wishlist_action = _resolve_action(WishlistAction, action, "wishlist")
        items = _require_items(items, wishlist_action.value)
        if value is None:
            raise InvalidArgumentError(f"GA4: Cannot track {wishlist_action.value} without value")

        params = self._priced_items_params(items, round_money(value), {}, custom_params)
        await self._emit(wishlist_action.value, params, EventCategory.ECOMMERCE, options)

    # ==================================================================
    # E-commerce: checkout funnel
    # ==================================================================

    async def track_begin_checkout(
        self,
        *,
        value: float,
        items: Iterable[ItemInput] | None = None,
        coupon: str | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        """Track begin_checkout.  Items may be empty; ``value`` must be numeric."""
        if value is None:
            raise InvalidArgumentError("GA4: Cannot track begin_checkout without value")
        extra = {"coupon": coupon} if coupon else {}
        params = self._priced_items_params(list(items or ()), round_money(value), extra, custom_params)
        await self._emit(GAEvents.BEGIN_CHECKOUT, params, EventCategory.ECOMMERCE, options)

    async def track_shipping_info(
        self,
        *,
        items: Iterable[ItemInput],
        value: float,
        shipping_tier: str,
        coupon: str | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        items = _require_items(items, "shipping info")
        rounded = _require_value(value, "shipping info")
        extra: dict[str, Any] = {GAParams.SHIPPING_TIER: shipping_tier}
        if coupon:
            extra["coupon"] = coupon
        params = self._priced_items_params(items, rounded, extra, custom_params)
        await self._emit(GAEvents.ADD_SHIPPING_INFO, params, EventCategory.ECOMMERCE, options)

    async def track_payment_info(
        self,
        *,
        items: Iterable[ItemInput],
        value: float,
        payment_type: str,
        coupon: str | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        items = _require_items(items, "payment info")
        rounded = _require_value(value, "payment info")
        extra: dict[str, Any] = {GAParams.PAYMENT_TYPE: payment_type}
        if coupon:
            extra["coupon"] = coupon
        params = self._priced_items_params(items, rounded, extra, custom_params)
        await self._emit(GAEvents.ADD_PAYMENT_INFO, params, EventCategory.ECOMMERCE, options)

    # ==================================================================
    # E-commerce: transactions
    # ==================================================================

    def _transaction_params(
        self,
        kind: str,
        transaction_id: str,
        value: float,
        items: Iterable[ItemInput] | None,
        *,
        currency: str | None,
        affiliation: str | None,
        coupon: str | None,
        shipping: float | None,
        tax: float | None,
        custom_params: Params | None,
    ) -> dict[str, Any]:
        if (
            not isinstance(transaction_id, str)
            or not transaction_id.strip()
            or value is None
            or to_decimal(value, "value") <= 0
        ):
            raise InvalidArgumentError(f"GA4: Invalid {kind} parameters")
        if currency is not None and not is_currency_valid(currency):
            raise InvalidArgumentError(f"GA4: Invalid currency code {currency!r}")

        params: dict[str, Any] = {
            GAParams.TRANSACTION_ID: transaction_id,
            GAParams.CURRENCY: currency or self._config.currency,
            # Sum of price * quantity across items
            GAParams.VALUE: round_money(value),
            GAParams.ITEMS: normalize_items(items),
        }
        if affiliation:
            params["affiliation"] = affiliation
        if coupon:
            params["coupon"] = coupon
        if shipping is not None:
            params["shipping"] = round_money(shipping, "shipping")
        if tax is not None:
            params["tax"] = round_money(tax, "tax")
        params.update(custom_params or {})
        return params

    async def track_purchase(
        self,
        *,
        transaction_id: str,
        value: float,
        items: Iterable[ItemInput] | None = None,
        currency: str | None = None,
        affiliation: str | None = None,
        coupon: str | None = None,
        shipping: float | None = None,
        tax: float | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        params = self._transaction_params(
            "purchase", transaction_id, value, items,
            currency=currency, affiliation=affiliation, coupon=coupon,
            shipping=shipping, tax=tax, custom_params=custom_params,
        )
        await self._emit(GAEvents.PURCHASE, params, EventCategory.ECOMMERCE, options)

    async def track_refund(
        self,
        *,
        transaction_id: str,
        value: float,
        items: Iterable[ItemInput] | None = None,
        currency: str | None = None,
        affiliation: str | None = None,
        coupon: str | None = None,
        shipping: float | None = None,
        tax: float | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        params = self._transaction_params(
            "refund", transaction_id, value, items,
            currency=currency, affiliation=affiliation, coupon=coupon,
            shipping=shipping, tax=tax, custom_params=custom_params,
        )
        await self._emit(GAEvents.REFUND, params, EventCategory.ECOMMERCE, options)

    async def track_generate_lead(
        self,
        *,
        value: float | None = None,
        currency: str | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        params: dict[str, Any] = {}
        if value is not None:
            params[GAParams.CURRENCY] = currency or self._config.currency
            params[GAParams.VALUE] = round_money(value)
        params.update(custom_params or {})
        await self._emit(GAEvents.GENERATE_LEAD, params, EventCategory.CONVERSION, options)

    # ==================================================================
    # E-commerce: promotions
    # ==================================================================

    async def track_promotion(
        self,
        action: PromotionAction | str,
        *,
        items: Iterable[ItemInput],
        creative_name: str,
        creative_slot: str | None = None,
        promotion_id: str | None = None,
        promotion_name: str | None = None,
        custom_params: Params | None = None,
        options: TrackingOptions | None = None,
    ) -> None:
        promo_action = _resolve_action(PromotionAction, action, "promotion")
        items = _require_items(items, promo_action.value)
        if not creative_name:
            raise InvalidArgumentError(
                f"GA4: Cannot track {promo_action.value} without creative_name"
            )

        params: dict[str, Any] = {GAParams.CREATIVE_NAME: creative_name}
        for key, val in (
            (GAParams.CREATIVE_SLOT, creative_slot),
            (GAParams.PROMOTION_ID, promotion_id),
            (GAParams.PROMOTION_NAME, promotion_name),
        ):
            if val is not None:
                params[key] = val
        params[GAParams.ITEMS] = normalize_items(items)
        params.update(custom_params or {})
        await self._emit(promo_action.value, params, EventCategory.ECOMMERCE, options)
