"""Enumerations used across the tracking runtime."""

from enum import Enum


class InitializationState(str, Enum):
    NOT_INITIALIZED = "NOT_INITIALIZED"
    INITIALIZING = "INITIALIZING"
    INITIALIZED = "INITIALIZED"
    FAILED = "FAILED"


class EventCategory(str, Enum):
    """Category tag stamped on every canonical event."""

    ENGAGEMENT = "engagement"
    ECOMMERCE = "ecommerce"
    NAVIGATION = "navigation"
    INTERACTION = "interaction"
    CONVERSION = "conversion"
    ERROR = "error"
    PERFORMANCE = "performance"
    CUSTOM = "custom"


class ItemAction(str, Enum):
    VIEW_ITEM = "view_item"
    SELECT_ITEM = "select_item"
    VIEW_ITEM_LIST = "view_item_list"


class CartAction(str, Enum):
    ADD_TO_CART = "add_to_cart"
    REMOVE_FROM_CART = "remove_from_cart"
    VIEW_CART = "view_cart"
    UPDATE_CART = "update_cart"


class WishlistAction(str, Enum):
    ADD_TO_WISHLIST = "add_to_wishlist"
    REMOVE_FROM_WISHLIST = "remove_from_wishlist"
    VIEW_WISHLIST = "view_wishlist"
    UPDATE_WISHLIST = "update_wishlist"


class PromotionAction(str, Enum):
    VIEW_PROMOTION = "view_promotion"
    SELECT_PROMOTION = "select_promotion"


class VideoAction(str, Enum):
    START = "video_start"
    PROGRESS = "video_progress"
    COMPLETE = "video_complete"


class Transport(str, Enum):
    """Transport hint forwarded to the reporting backend."""

    BEACON = "beacon"
    XHR = "xhr"
    IMAGE = "image"
