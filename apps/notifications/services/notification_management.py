"""
Bulk notification service.

Notifications are drafted by an admin, approved, then sent by e-mail to
the parents of the chosen target. Every recipient gets a delivery log.
"""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.template.defaultfilters import linebreaksbr
from django.utils import timezone

from apps.accounts.models import User, UserRole
from apps.groups.models import Group
from apps.trips.models import Trip, RegistrationStatus
from apps.notifications.mailer import send_bulk_emails
from apps.notifications.models import (
    Notification,
    NotificationLog,
    NotificationStatus,
    TargetType,
    Channel,
    DeliveryStatus,
)

from .exceptions import (
    NotificationNotFoundError,
    InvalidNotificationTargetError,
    InvalidNotificationStateError,
    UnsupportedChannelError,
    NoRecipientsError,
)

logger = logging.getLogger(__name__)


def resolve_recipients(
    *,
    target_type: str,
    target_group: Optional[Group] = None,
    target_trip: Optional[Trip] = None,
    target_user: Optional[User] = None,
) -> List[User]:
    """
    Active parents addressed by a notification target, each once.

    Args:
        target_type: all, group, trip or individual
        target_group: Group whose children's parents are addressed
        target_trip: Trip whose actively registered children's parents are addressed
        target_user: The single addressed user

    Returns:
        Parents ordered by e-mail
    """
    parents = User.objects.filter(role=UserRole.PARENT, is_active=True)

    if target_type == TargetType.ALL:
        qs = parents
    elif target_type == TargetType.GROUP:
        if target_group is None:
            return []
        qs = parents.filter(participants__group_assignment__group=target_group)
    elif target_type == TargetType.TRIP:
        if target_trip is None:
            return []
        qs = parents.filter(
            participants__registrations__trip=target_trip,
            participants__registrations__status=RegistrationStatus.ACTIVE,
        )
    elif target_type == TargetType.INDIVIDUAL:
        if target_user is None:
            return []
        qs = parents.filter(id=target_user.id)
    else:
        raise InvalidNotificationTargetError(f"Unknown target type: {target_type}")

    return list(qs.distinct().order_by('email'))


def _get_notification(notification_id: UUID, *, lock: bool = False) -> Notification:
    qs = Notification.objects.select_for_update() if lock else Notification.objects.all()
    try:
        return qs.get(id=notification_id)
    except Notification.DoesNotExist:
        raise NotificationNotFoundError(f"Notification with ID {notification_id} not found")


def _target_objects(target_type, target_group_id, target_trip_id, target_user_id):
    lookups = {
        TargetType.GROUP: (Group, target_group_id, 'target_group'),
        TargetType.TRIP: (Trip, target_trip_id, 'target_trip'),
        TargetType.INDIVIDUAL: (User, target_user_id, 'target_user'),
    }
    targets = {}
    if target_type in lookups:
        model, object_id, field = lookups[target_type]
        if not object_id:
            raise InvalidNotificationTargetError(f"{field} is required for target type '{target_type}'")
        try:
            targets[field] = model.objects.get(id=object_id)
        except model.DoesNotExist:
            raise InvalidNotificationTargetError(f"{field} {object_id} not found")
    return targets


@transaction.atomic
def create_notification(
    *,
    created_by: User,
    subject: str,
    body: str,
    target_type: str,
    notification_type: str = 'custom',
    channel: str = Channel.EMAIL,
    target_group_id: Optional[UUID] = None,
    target_trip_id: Optional[UUID] = None,
    target_user_id: Optional[UUID] = None,
) -> Notification:
    """
    Create a draft notification and count its recipients.

    Raises:
        InvalidNotificationTargetError: If the target id is missing or unknown
    """
    targets = _target_objects(target_type, target_group_id, target_trip_id, target_user_id)
    recipients = resolve_recipients(target_type=target_type, **targets)

    notification = Notification.objects.create(
        created_by=created_by,
        subject=subject,
        body=body,
        target_type=target_type,
        notification_type=notification_type,
        channel=channel,
        recipient_count=len(recipients),
        **targets,
    )
    logger.info("Created notification %s for %s recipient(s)", notification.id, len(recipients))
    return notification


@transaction.atomic
def approve_notification(*, notification_id: UUID, approved_by: User) -> Notification:
    """
    Approve a draft for sending.

    Raises:
        InvalidNotificationStateError: If the notification is not a draft
    """
    notification = _get_notification(notification_id, lock=True)
    if notification.status != NotificationStatus.DRAFT:
        raise InvalidNotificationStateError("Only draft notifications can be approved")

    notification.status = NotificationStatus.APPROVED
    notification.approved_by = approved_by
    notification.approved_at = timezone.now()
    notification.save(update_fields=['status', 'approved_by', 'approved_at'])
    return notification


def send_notification(*, notification_id: UUID) -> Dict[str, int]:
    """
    Send an approved notification by e-mail.

    Mail is sent outside a transaction; the logs and final status are
    written afterwards in one.

    Returns:
        {'sent_count': int, 'failed_count': int}

    Raises:
        InvalidNotificationStateError: If the notification is not approved
        UnsupportedChannelError: If the channel is SMS
        NoRecipientsError: If nobody matches the target
    """
    notification = _get_notification(notification_id)

    if notification.status != NotificationStatus.APPROVED:
        raise InvalidNotificationStateError("Only approved notifications can be sent")
    if notification.channel == Channel.SMS:
        raise UnsupportedChannelError("SMS delivery is not supported")

    recipients = resolve_recipients(
        target_type=notification.target_type,
        target_group=notification.target_group,
        target_trip=notification.target_trip,
        target_user=notification.target_user,
    )
    if not recipients:
        raise NoRecipientsError("No recipients match the notification target")

    results = send_bulk_emails(
        recipients=[user.email for user in recipients],
        subject=notification.subject,
        html=linebreaksbr(notification.body, autoescape=True),
    )
    users_by_email = {user.email: user for user in recipients}

    sent_count = sum(1 for r in results if r['success'])
    failed_count = len(results) - sent_count

    with transaction.atomic():
        NotificationLog.objects.bulk_create([
            NotificationLog(
                notification=notification,
                recipient=users_by_email.get(result['email']),
                recipient_email=result['email'],
                channel=Channel.EMAIL,
                status=DeliveryStatus.SENT if result['success'] else DeliveryStatus.FAILED,
                error_message=result['error'] or '',
            )
            for result in results
        ])
        notification.status = NotificationStatus.SENT if sent_count else NotificationStatus.FAILED
        notification.sent_at = timezone.now()
        notification.recipient_count = len(results)
        notification.save(update_fields=['status', 'sent_at', 'recipient_count'])

    logger.info(
        "Notification %s sent: %s ok, %s failed",
        notification.id, sent_count, failed_count,
    )
    return {'sent_count': sent_count, 'failed_count': failed_count}


@transaction.atomic
def delete_notification(*, notification_id: UUID) -> None:
    """
    Delete a draft.

    Raises:
        InvalidNotificationStateError: If the notification is not a draft
    """
    notification = _get_notification(notification_id, lock=True)
    if notification.status != NotificationStatus.DRAFT:
        raise InvalidNotificationStateError("Only draft notifications can be deleted")
    notification.delete()


def list_notifications(*, status: Optional[str] = None) -> QuerySet:
    qs = Notification.objects.select_related(
        'target_group', 'target_trip', 'target_user', 'created_by', 'approved_by',
    )
    if status:
        qs = qs.filter(status=status)
    return qs


def get_notification(*, notification_id: UUID) -> Notification:
    return _get_notification(notification_id)


def get_notification_logs(*, notification_id: UUID) -> QuerySet:
    notification = _get_notification(notification_id)
    return notification.logs.select_related('recipient')
