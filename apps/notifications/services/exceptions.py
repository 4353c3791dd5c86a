"""
Domain-specific exceptions for notifications app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class NotificationsServiceError(Exception):
    """Base exception for all notifications service errors."""
    pass


class NotificationNotFoundError(NotificationsServiceError):
    """Raised when a notification does not exist."""
    pass


class InvalidNotificationTargetError(NotificationsServiceError):
    """Raised when the target id does not match the target type."""
    pass


class InvalidNotificationStateError(NotificationsServiceError):
    """Raised when a notification is not in the status the action requires."""
    pass


class UnsupportedChannelError(NotificationsServiceError):
    """Raised when sending through a channel that is not available (SMS)."""
    pass


class NoRecipientsError(NotificationsServiceError):
    """Raised when a notification resolves to no recipients."""
    pass


class EmailTemplateNotFoundError(NotificationsServiceError):
    """Raised when an e-mail template key is unknown."""
    pass
