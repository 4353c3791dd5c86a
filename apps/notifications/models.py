# ==========================================
# apps/notifications/models.py
# ==========================================

from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models
import uuid


class NotificationType(models.TextChoices):
    PAYMENT_REMINDER = 'payment_reminder', 'Payment reminder'
    NEW_TRIP = 'new_trip', 'New trip'
    TRIP_UPDATE = 'trip_update', 'Trip update'
    CUSTOM = 'custom', 'Custom'


class TargetType(models.TextChoices):
    ALL = 'all', 'All parents'
    GROUP = 'group', 'Group'
    TRIP = 'trip', 'Trip'
    INDIVIDUAL = 'individual', 'Individual'


class Channel(models.TextChoices):
    EMAIL = 'email', 'E-mail'
    SMS = 'sms', 'SMS'
    BOTH = 'both', 'E-mail and SMS'


class NotificationStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    APPROVED = 'approved', 'Approved'
    SENT = 'sent', 'Sent'
    FAILED = 'failed', 'Failed'


class DeliveryStatus(models.TextChoices):
    SENT = 'sent', 'Sent'
    FAILED = 'failed', 'Failed'
    BOUNCED = 'bounced', 'Bounced'


class Notification(models.Model):
    """Bulk message to parents, approved by an admin before sending."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    notification_type = models.CharField(
        max_length=20,
        choices=NotificationType.choices,
        default=NotificationType.CUSTOM
    )
    target_type = models.CharField(max_length=15, choices=TargetType.choices)
    target_group = models.ForeignKey(
        'groups.Group',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications'
    )
    target_trip = models.ForeignKey(
        'trips.Trip',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications'
    )
    target_user = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications_received'
    )
    subject = models.CharField(max_length=200, validators=[MinLengthValidator(3)])
    body = models.TextField(validators=[MinLengthValidator(10)])
    channel = models.CharField(max_length=10, choices=Channel.choices, default=Channel.EMAIL)
    status = models.CharField(
        max_length=10,
        choices=NotificationStatus.choices,
        default=NotificationStatus.DRAFT
    )
    recipient_count = models.PositiveIntegerField(default=0)

    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications_created'
    )
    approved_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notifications_approved'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notifications'
        indexes = [
            models.Index(fields=['status', 'created_at']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.subject} ({self.status})"

    def clean(self):
        required = {
            TargetType.GROUP: ('target_group', self.target_group_id),
            TargetType.TRIP: ('target_trip', self.target_trip_id),
            TargetType.INDIVIDUAL: ('target_user', self.target_user_id),
        }
        if self.target_type in required:
            field, value = required[self.target_type]
            if value is None:
                raise ValidationError({field: 'This field is required for the selected target.'})


class NotificationLog(models.Model):
    """Delivery outcome for one recipient of a notification."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    notification = models.ForeignKey(
        Notification,
        on_delete=models.CASCADE,
        related_name='logs'
    )
    recipient = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='notification_logs'
    )
    recipient_email = models.EmailField()
    channel = models.CharField(max_length=10, choices=Channel.choices, default=Channel.EMAIL)
    status = models.CharField(max_length=10, choices=DeliveryStatus.choices)
    sent_at = models.DateTimeField(auto_now_add=True)
    error_message = models.TextField(blank=True)

    class Meta:
        db_table = 'notification_logs'
        indexes = [
            models.Index(fields=['notification', 'status']),
        ]
        ordering = ['-sent_at']

    def __str__(self):
        return f"{self.recipient_email}: {self.status}"


class EmailTemplate(models.Model):
    """
    Admin-editable override of a transactional e-mail.

    The primary key is the template slug (e.g. ``trip_info``).
    ``variables`` lists the ``{{key}}`` placeholders with a description.
    """

    id = models.SlugField(primary_key=True, max_length=50)
    name = models.CharField(max_length=200)
    subject = models.CharField(max_length=255)
    body_html = models.TextField()
    variables = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'email_templates'
        ordering = ['id']

    def __str__(self):
        return self.name
