"""Domain-specific exceptions for notification delivery."""


class NotificationError(Exception):
    """Base class for notification errors."""


class DispatchError(NotificationError):
    """Raised when a single alert could not be delivered to its target."""
