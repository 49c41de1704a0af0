"""Domain-specific exceptions for notification delivery."""


class NotificationError(Exception):
    """Raised when a message that must be delivered could not be sent."""
    pass
