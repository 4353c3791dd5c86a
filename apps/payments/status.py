"""
Payment status derivation.

Status is a pure function of amount, amount paid and due date.
``cancelled`` is set administratively and never derived.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import models
from django.utils import timezone


class PaymentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PARTIALLY_PAID = 'partially_paid', 'Partially paid'
    PAID = 'paid', 'Paid'
    OVERDUE = 'overdue', 'Overdue'
    PARTIALLY_PAID_OVERDUE = 'partially_paid_overdue', 'Partially paid, overdue'
    CANCELLED = 'cancelled', 'Cancelled'


def derive_payment_status(
    *,
    amount: Decimal,
    amount_paid: Decimal,
    due_date: Optional[date],
    today: Optional[date] = None,
    current_status: Optional[str] = None,
) -> str:
    """
    Compute the status of a payment.

    Args:
        amount: Amount owed after discount
        amount_paid: Sum of received money
        due_date: Payment deadline, None when not set
        today: Reference date (defaults to the local date)
        current_status: Stored status; a cancelled payment stays cancelled

    Returns:
        One of the PaymentStatus values
    """
    if current_status == PaymentStatus.CANCELLED:
        return PaymentStatus.CANCELLED

    if amount_paid >= amount:
        return PaymentStatus.PAID

    if today is None:
        today = timezone.localdate()
    overdue = due_date is not None and due_date < today

    if amount_paid > 0:
        return PaymentStatus.PARTIALLY_PAID_OVERDUE if overdue else PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.OVERDUE if overdue else PaymentStatus.PENDING
