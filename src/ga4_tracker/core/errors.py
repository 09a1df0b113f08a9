"""Custom exception hierarchy for the tracking runtime."""


class TrackingError(Exception):
    """Base exception for all tracking runtime errors."""


# --- Configuration ---
class ConfigError(TrackingError):
    """Invalid or missing configuration."""


# --- Lifecycle ---
class InitializationError(TrackingError):
    """The reporting backend could not be loaded."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"GA4 initialization failed: {str(cause) or type(cause).__name__}")


# --- Builder arguments ---
class InvalidArgumentError(TrackingError, ValueError):
    """A builder was called with missing or invalid required fields."""


class UnsupportedActionError(InvalidArgumentError):
    """A builder was called with an action it does not recognise."""

    def __init__(self, family: str, action: object):
        self.family = family
        self.action = action
        super().__init__(f"GA4: Unsupported {family} action {action!r}")


# --- Dispatch ---
class DispatchError(TrackingError):
    """The reporting channel raised while handling an event."""

    def __init__(self, event_name: str, cause: BaseException):
        self.event_name = event_name
        self.cause = cause
        super().__init__(f"GA4: Error tracking event {event_name}: {cause}")
