"""
Notifications services.

Usage:
    from apps.notifications.services import create_notification, send_notification
"""

from .exceptions import (
    NotificationsServiceError,
    NotificationNotFoundError,
    InvalidNotificationTargetError,
    InvalidNotificationStateError,
    UnsupportedChannelError,
    NoRecipientsError,
    EmailTemplateNotFoundError,
)
from .notification_management import (
    resolve_recipients,
    create_notification,
    approve_notification,
    send_notification,
    delete_notification,
    list_notifications,
    get_notification,
    get_notification_logs,
)
from .email_templates import (
    list_email_templates,
    get_email_template,
    update_email_template,
    reset_email_template,
)

__all__ = [
    # Exceptions
    'NotificationsServiceError',
    'NotificationNotFoundError',
    'InvalidNotificationTargetError',
    'InvalidNotificationStateError',
    'UnsupportedChannelError',
    'NoRecipientsError',
    'EmailTemplateNotFoundError',
    # Notifications
    'resolve_recipients',
    'create_notification',
    'approve_notification',
    'send_notification',
    'delete_notification',
    'list_notifications',
    'get_notification',
    'get_notification_logs',
    # E-mail templates
    'list_email_templates',
    'get_email_template',
    'update_email_template',
    'reset_email_template',
]
