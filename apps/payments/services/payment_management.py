"""
Payment management service.

Admin bookkeeping (transactions, discounts, manual status changes) and
the parent-facing payment listing.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional
from uuid import UUID

from django.conf import settings
from django.db import transaction
from django.db.models import Count, Q, QuerySet, Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.trips.models import Currency, ParticipationStatus, TripRegistration
from apps.payments.models import Payment, PaymentTransaction, PaymentStatus, OPEN_STATUSES

from .exceptions import (
    PaymentNotFoundError,
    PaymentAlreadyPaidError,
    PaymentCancelledError,
    InvalidPaymentOperationError,
)

logger = logging.getLogger(__name__)

MARKED_AS_PAID_NOTE = 'Oznaczone jako opłacone przez admina'
CENT = Decimal('0.01')


def _payment_queryset() -> QuerySet:
    return Payment.objects.select_related(
        'template',
        'registration__trip',
        'registration__participant__parent',
    )


def _lock_payment(payment_id: UUID) -> Payment:
    try:
        return (
            Payment.objects
            .select_related('registration__trip', 'registration__participant__parent')
            .select_for_update(of=('self',))
            .get(id=payment_id)
        )
    except Payment.DoesNotExist:
        raise PaymentNotFoundError(f"Payment with ID {payment_id} not found")


def _notify_paid(payment: Payment) -> None:
    from apps.notifications.emails import send_payment_confirmed_email

    transaction.on_commit(lambda: send_payment_confirmed_email(payment))


def get_payment_for_user(*, payment_id: UUID, user: User) -> Payment:
    """
    Get a payment visible to the user (admins: all, parents: own children).

    Raises:
        PaymentNotFoundError: If the payment doesn't exist or is not visible
    """
    qs = _payment_queryset()
    if not user.is_admin:
        qs = qs.filter(registration__participant__parent=user)
    try:
        return qs.get(id=payment_id)
    except Payment.DoesNotExist:
        raise PaymentNotFoundError(f"Payment with ID {payment_id} not found")


@transaction.atomic
def add_transaction(
    *,
    payment_id: UUID,
    recorded_by: User,
    amount: Decimal,
    transaction_date: date,
    payment_method: str,
    currency: Optional[str] = None,
    notes: str = '',
) -> PaymentTransaction:
    """
    Record money received and re-derive the payment status.

    Args:
        payment_id: Payment receiving the money
        recorded_by: Admin recording the transaction
        amount: Amount received (> 0)
        transaction_date: Date the money arrived
        payment_method: cash or transfer
        currency: Must match the payment currency (defaults to it)
        notes: Optional note

    Returns:
        Created PaymentTransaction

    Raises:
        PaymentNotFoundError: If payment doesn't exist
        PaymentCancelledError: If the payment is cancelled
        InvalidPaymentOperationError: If the currency doesn't match
    """
    payment = _lock_payment(payment_id)

    if payment.status == PaymentStatus.CANCELLED:
        raise PaymentCancelledError("Cannot record money for a cancelled payment")

    currency = currency or payment.currency
    if currency != payment.currency:
        raise InvalidPaymentOperationError(
            f"Transaction currency {currency} does not match payment currency {payment.currency}"
        )

    record = PaymentTransaction.objects.create(
        payment=payment,
        amount=amount,
        currency=currency,
        transaction_date=transaction_date,
        payment_method=payment_method,
        notes=notes,
        recorded_by=recorded_by,
    )

    payment.amount_paid += amount
    payment.payment_method_used = payment_method
    payment.refresh_status()
    payment.save()

    logger.info("Recorded %s %s for payment %s", amount, currency, payment.id)
    return record


@transaction.atomic
def mark_as_paid(*, payment_id: UUID, marked_by: User, payment_method: str) -> Payment:
    """
    Settle the remaining amount of a payment in one step.

    A transaction for the remaining amount is recorded and the parent
    gets a confirmation e-mail after commit.

    Raises:
        PaymentNotFoundError: If payment doesn't exist
        PaymentAlreadyPaidError: If nothing remains to be paid
        PaymentCancelledError: If the payment is cancelled
    """
    payment = _lock_payment(payment_id)

    if payment.status == PaymentStatus.CANCELLED:
        raise PaymentCancelledError("Cannot mark a cancelled payment as paid")
    if payment.status == PaymentStatus.PAID:
        raise PaymentAlreadyPaidError("Payment is already marked as paid")

    remaining = payment.remaining_amount
    if remaining > 0:
        PaymentTransaction.objects.create(
            payment=payment,
            amount=remaining,
            currency=payment.currency,
            transaction_date=timezone.localdate(),
            payment_method=payment_method,
            notes=MARKED_AS_PAID_NOTE,
            recorded_by=marked_by,
        )

    payment.amount_paid = payment.amount
    payment.payment_method_used = payment_method
    payment.marked_by = marked_by
    payment.refresh_status()
    payment.save()

    _notify_paid(payment)
    return payment


@transaction.atomic
def apply_discount(*, payment_id: UUID, discount_percentage: Decimal, applied_by: User) -> Payment:
    """
    Apply a percentage discount to the original amount.

    Raises:
        PaymentNotFoundError: If payment doesn't exist
        PaymentCancelledError: If the payment is cancelled
        InvalidPaymentOperationError: If the percentage is outside 0-100
    """
    discount_percentage = Decimal(discount_percentage)
    if not Decimal('0') <= discount_percentage <= Decimal('100'):
        raise InvalidPaymentOperationError("Discount must be between 0 and 100 percent")

    payment = _lock_payment(payment_id)
    if payment.status == PaymentStatus.CANCELLED:
        raise PaymentCancelledError("Cannot discount a cancelled payment")

    factor = (Decimal('100') - discount_percentage) / Decimal('100')
    payment.discount_percentage = discount_percentage
    payment.amount = (payment.original_amount * factor).quantize(CENT, rounding=ROUND_HALF_UP)
    payment.discount_applied_by = applied_by
    payment.discount_applied_at = timezone.now()
    payment.refresh_status()
    payment.save()

    logger.info("Applied %s%% discount to payment %s", discount_percentage, payment.id)
    return payment


@transaction.atomic
def set_payment_status(*, payment_id: UUID, status: str, marked_by: User) -> Payment:
    """
    Override the status of a payment.

    ``paid`` settles the full amount, ``pending`` resets the paid amount,
    other statuses are stored as given.
    """
    payment = _lock_payment(payment_id)

    payment.status = status
    if status == PaymentStatus.PAID:
        payment.amount_paid = payment.amount
        payment.paid_at = timezone.now()
        payment.marked_by = marked_by
    elif status == PaymentStatus.PENDING:
        payment.amount_paid = Decimal('0.00')
        payment.paid_at = None
    payment.save()

    if status == PaymentStatus.PAID:
        _notify_paid(payment)

    logger.info("Payment %s status set to %s by %s", payment.id, status, marked_by.email)
    return payment


@transaction.atomic
def update_amount(*, payment_id: UUID, amount: Decimal) -> Payment:
    """
    Change the amount owed and re-derive the status.

    Raises:
        InvalidPaymentOperationError: If the amount is negative
    """
    if amount < 0:
        raise InvalidPaymentOperationError("Amount cannot be negative")

    payment = _lock_payment(payment_id)
    payment.amount = amount
    payment.refresh_status()
    payment.save()
    return payment


@transaction.atomic
def update_admin_note(*, payment_id: UUID, note: str) -> Payment:
    payment = _lock_payment(payment_id)
    payment.admin_notes = note
    payment.save(update_fields=['admin_notes', 'updated_at'])
    return payment


def list_payments(
    *,
    trip_id: Optional[UUID] = None,
    status: Optional[str] = None,
    currency: Optional[str] = None,
    participant_id: Optional[UUID] = None,
) -> QuerySet:
    """All payments (admin) with optional filters."""
    qs = _payment_queryset()
    if trip_id:
        qs = qs.filter(registration__trip_id=trip_id)
    if status:
        qs = qs.filter(status=status)
    if currency:
        qs = qs.filter(currency=currency)
    if participant_id:
        qs = qs.filter(registration__participant_id=participant_id)
    return qs.order_by('due_date', 'registration__participant__last_name')


def list_parent_payments(*, parent: User, participant_id: Optional[UUID] = None) -> QuerySet:
    """
    Payments a parent has to settle.

    Only non-cancelled payments of confirmed registrations of the parent's
    own children are listed.
    """
    qs = (
        _payment_queryset()
        .filter(
            registration__participant__parent=parent,
            registration__participation_status=ParticipationStatus.CONFIRMED,
        )
        .exclude(status=PaymentStatus.CANCELLED)
    )
    if participant_id:
        qs = qs.filter(registration__participant_id=participant_id)
    return qs.order_by('due_date', 'installment_number')


def get_bank_accounts_for_parent(*, parent: User) -> Dict[str, str]:
    """Bank accounts of the trip a parent's child is confirmed on, or the club defaults."""
    registration = (
        TripRegistration.objects
        .filter(
            participant__parent=parent,
            participation_status=ParticipationStatus.CONFIRMED,
        )
        .select_related('trip')
        .order_by('-trip__departure_datetime')
        .first()
    )
    trip = registration.trip if registration else None
    return {
        'bank_account_pln': (trip and trip.bank_account_pln) or settings.DEFAULT_BANK_ACCOUNT_PLN,
        'bank_account_eur': (trip and trip.bank_account_eur) or settings.DEFAULT_BANK_ACCOUNT_EUR,
    }


def get_payment_transactions(*, payment_id: UUID, user: User) -> QuerySet:
    """Transactions of a payment (admin or owning parent)."""
    payment = get_payment_for_user(payment_id=payment_id, user=user)
    return payment.transactions.select_related('recorded_by')


def refresh_overdue_statuses(*, today: Optional[date] = None) -> int:
    """
    Re-derive the status of every open payment.

    Returns:
        Number of payments whose status changed
    """
    changed = 0
    for payment in Payment.objects.filter(status__in=OPEN_STATUSES).iterator():
        previous = payment.status
        if payment.refresh_status(today=today) != previous:
            payment.save(update_fields=['status', 'paid_at', 'updated_at'])
            changed += 1

    if changed:
        logger.info("Updated status of %s payment(s)", changed)
    return changed


def _percent(part: int, whole: int) -> int:
    if not whole:
        return 0
    return int((Decimal(part) * 100 / whole).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def finance_summary(*, search: str = '') -> Dict[str, Any]:
    """
    Per-trip money overview for the admin (cancelled payments left out).

    A payment counts as collected once its status is ``paid``; partial
    transactions are not part of the collected amount.

    Args:
        search: Optional case-insensitive fragment of the trip title

    Returns:
        {'trips': [...], 'totals': {...}}, trips ordered by departure
    """
    zero = Decimal('0.00')
    paid = Q(status=PaymentStatus.PAID)
    pln = Q(currency=Currency.PLN)
    eur = Q(currency=Currency.EUR)

    qs = Payment.objects.exclude(status=PaymentStatus.CANCELLED)
    if search:
        qs = qs.filter(registration__trip__title__icontains=search.strip())

    rows = (
        qs.values(
            'registration__trip',
            'registration__trip__title',
            'registration__trip__departure_datetime',
        )
        .annotate(
            participant_count=Count('registration__participant', distinct=True),
            total_pln=Sum('amount', filter=pln),
            paid_pln=Sum('amount', filter=pln & paid),
            total_eur=Sum('amount', filter=eur),
            paid_eur=Sum('amount', filter=eur & paid),
            total_payments=Count('id'),
            paid_payments=Count('id', filter=paid),
        )
        .order_by('registration__trip__departure_datetime', 'registration__trip__title')
    )

    trips = []
    for row in rows:
        total_pln = row['total_pln'] or zero
        paid_pln = row['paid_pln'] or zero
        total_eur = row['total_eur'] or zero
        paid_eur = row['paid_eur'] or zero
        trips.append({
            'trip_id': row['registration__trip'],
            'trip_title': row['registration__trip__title'],
            'departure_datetime': row['registration__trip__departure_datetime'],
            'participant_count': row['participant_count'],
            'total_pln': total_pln,
            'paid_pln': paid_pln,
            'missing_pln': total_pln - paid_pln,
            'total_eur': total_eur,
            'paid_eur': paid_eur,
            'missing_eur': total_eur - paid_eur,
            'total_payments': row['total_payments'],
            'paid_payments': row['paid_payments'],
            'paid_percent': _percent(row['paid_payments'], row['total_payments']),
        })

    totals = {
        key: sum((trip[key] for trip in trips), zero)
        for key in ('total_pln', 'paid_pln', 'missing_pln', 'total_eur', 'paid_eur', 'missing_eur')
    }
    for key in ('participant_count', 'total_payments', 'paid_payments'):
        totals[key] = sum(trip[key] for trip in trips)
    totals['trip_count'] = len(trips)
    totals['paid_percent'] = _percent(totals['paid_payments'], totals['total_payments'])

    return {'trips': trips, 'totals': totals}
