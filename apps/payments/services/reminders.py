"""
Daily payment reminders.

Parents of confirmed participants are reminded a few days before a
payment is due.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, Optional

from django.conf import settings
from django.utils import timezone

from apps.trips.models import ParticipationStatus
from apps.payments.models import Payment, OPEN_STATUSES

logger = logging.getLogger(__name__)


def payments_due_for_reminder(*, reminder_date: date):
    return (
        Payment.objects
        .filter(due_date=reminder_date, status__in=OPEN_STATUSES)
        .select_related(
            'registration__trip',
            'registration__participant__parent',
        )
        .order_by('registration__participant__last_name')
    )


def send_payment_reminders(
    *,
    today: Optional[date] = None,
    days_ahead: Optional[int] = None,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """
    E-mail a reminder for every open payment due ``days_ahead`` days from today.

    Registrations that are not confirmed and parents without e-mail are
    skipped. Mail failures are counted, never raised.

    Args:
        today: Reference date (defaults to the local date)
        days_ahead: Days before the due date (defaults to PAYMENT_REMINDER_DAYS_AHEAD)
        dry_run: Count what would be sent without sending

    Returns:
        {'ok', 'date', 'reminder_date', 'sent', 'skipped', 'errors'}
    """
    from apps.notifications.emails import send_payment_reminder_email

    today = today or timezone.localdate()
    if days_ahead is None:
        days_ahead = settings.PAYMENT_REMINDER_DAYS_AHEAD
    reminder_date = today + timedelta(days=days_ahead)

    sent = skipped = errors = 0
    for payment in payments_due_for_reminder(reminder_date=reminder_date):
        registration = payment.registration
        parent = registration.participant.parent

        if registration.participation_status != ParticipationStatus.CONFIRMED or not parent.email:
            skipped += 1
            continue

        if dry_run:
            sent += 1
            continue

        result = send_payment_reminder_email(payment)
        if result.sent:
            payment.reminder_sent_at = timezone.now()
            payment.save(update_fields=['reminder_sent_at', 'updated_at'])
            sent += 1
        else:
            errors += 1

    logger.info(
        "Payment reminders for %s: sent=%s skipped=%s errors=%s",
        reminder_date, sent, skipped, errors,
    )
    return {
        'ok': True,
        'date': today.isoformat(),
        'reminder_date': reminder_date.isoformat(),
        'sent': sent,
        'skipped': skipped,
        'errors': errors,
    }
