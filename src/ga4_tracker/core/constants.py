"""GA4 event vocabulary, parameter names, limits and validation patterns.

Values follow the Google Analytics 4 reference:
https://developers.google.com/analytics/devguides/collection/ga4/reference/events
"""

from __future__ import annotations

import re


class GAEvents:
    """Event names understood by the reporting backend."""

    # Automatically collected
    FIRST_VISIT = "first_visit"
    SESSION_START = "session_start"
    USER_ENGAGEMENT = "user_engagement"

    # Enhanced measurement
    PAGE_VIEW = "page_view"
    SCROLL = "scroll"
    OUTBOUND = "click"
    VIDEO_START = "video_start"
    VIDEO_PROGRESS = "video_progress"
    VIDEO_COMPLETE = "video_complete"
    FILE_DOWNLOAD = "file_download"

    # Recommended
    LOGIN = "login"
    SEARCH = "search"
    SELECT_CONTENT = "select_content"
    SHARE = "share"
    SIGN_UP = "sign_up"
    GENERATE_LEAD = "generate_lead"

    # Ecommerce
    VIEW_ITEM = "view_item"
    SELECT_ITEM = "select_item"
    VIEW_ITEM_LIST = "view_item_list"
    ADD_TO_CART = "add_to_cart"
    REMOVE_FROM_CART = "remove_from_cart"
    VIEW_CART = "view_cart"
    UPDATE_CART = "update_cart"
    ADD_TO_WISHLIST = "add_to_wishlist"
    REMOVE_FROM_WISHLIST = "remove_from_wishlist"
    VIEW_WISHLIST = "view_wishlist"
    UPDATE_WISHLIST = "update_wishlist"
    BEGIN_CHECKOUT = "begin_checkout"
    ADD_SHIPPING_INFO = "add_shipping_info"
    ADD_PAYMENT_INFO = "add_payment_info"
    PURCHASE = "purchase"
    REFUND = "refund"
    VIEW_PROMOTION = "view_promotion"
    SELECT_PROMOTION = "select_promotion"

    # Diagnostics
    EXCEPTION = "exception"
    TIMING_COMPLETE = "timing_complete"


class GAParams:
    """Parameter names shared across events."""

    CURRENCY = "currency"
    VALUE = "value"
    TRANSACTION_ID = "transaction_id"
    PAYMENT_TYPE = "payment_type"
    SHIPPING_TIER = "shipping_tier"
    ITEMS = "items"
    ITEM_LIST_ID = "item_list_id"
    ITEM_LIST_NAME = "item_list_name"
    PRICE = "price"
    QUANTITY = "quantity"
    CREATIVE_NAME = "creative_name"
    CREATIVE_SLOT = "creative_slot"
    PROMOTION_ID = "promotion_id"
    PROMOTION_NAME = "promotion_name"
    PAGE_TITLE = "page_title"
    PAGE_LOCATION = "page_location"
    PAGE_REFERRER = "page_referrer"
    CONTENT_TYPE = "content_type"
    CONTENT_ID = "content_id"
    SEARCH_TERM = "search_term"
    VIDEO_TITLE = "video_title"
    VIDEO_URL = "video_url"
    VIDEO_DURATION = "video_duration"
    VIDEO_CURRENT_TIME = "video_current_time"
    VIDEO_PERCENT = "video_percent"
    METHOD = "method"
    DESCRIPTION = "description"
    FATAL = "fatal"
    ENGAGEMENT_TYPE = "engagement_type"
    EVENT_TIMESTAMP = "event_timestamp"


# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------

MAX_EVENT_NAME_LENGTH = 40
MAX_PARAMETER_NAME_LENGTH = 40
MAX_PARAMETERS_PER_EVENT = 200
MIN_QUANTITY = 1
MAX_QUANTITY = 999_999

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

MEASUREMENT_ID_PATTERN = re.compile(r"^G-[A-Z0-9]{10}$")
CURRENCY_CODE_PATTERN = re.compile(r"^[A-Z]{3}$")
EVENT_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]{0,39}$")
PARAMETER_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]{0,39}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")
URL_PATTERN = re.compile(r"^https?://.+")

# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------

GTAG_SCRIPT_URL = "https://www.googletagmanager.com/gtag/js?id={measurement_id}"
DEFAULT_CURRENCY = "USD"

# Delivery defaults
DEFAULT_BATCH_SIZE = 10
DEFAULT_BATCH_TIMEOUT_MS = 5000
DEFAULT_MAX_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_MAX_QUEUE_SIZE = 1000
