"""
Creation and cancellation of registration payments.

Payments are materialized from the trip's payment templates when a
registration is created or confirmed.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from django.db import transaction
from django.utils import timezone

from apps.trips.models import PaymentType, TripPaymentTemplate, TripRegistration
from apps.payments.models import Payment, PaymentStatus

logger = logging.getLogger(__name__)


def _payment_from_template(
    registration: TripRegistration,
    template: TripPaymentTemplate,
    due_date=None,
) -> Payment:
    payment = Payment(
        registration=registration,
        template=template,
        payment_type=template.payment_type,
        installment_number=template.installment_number,
        category_name=template.category_name,
        original_amount=template.amount,
        discount_percentage=Decimal('0.00'),
        amount=template.amount,
        amount_paid=Decimal('0.00'),
        currency=template.currency,
        due_date=due_date if due_date is not None else template.due_date,
        status=PaymentStatus.PENDING,
    )
    payment.refresh_status()
    return payment


def select_templates_for_birth_year(templates: List[TripPaymentTemplate], birth_year: int):
    """
    Pick the templates that apply to a child born in ``birth_year``.

    Every installment applies. When a first installment includes the season
    pass, a single matching pass is added with that installment's due date;
    otherwise every season pass whose birth-year range matches applies.

    Returns:
        List of (template, due_date_override or None)
    """
    installments = [t for t in templates if t.payment_type == PaymentType.INSTALLMENT]
    passes = [
        t for t in templates
        if t.payment_type == PaymentType.SEASON_PASS and t.matches_birth_year(birth_year)
    ]

    selected = [(template, None) for template in installments]

    first_with_pass: Optional[TripPaymentTemplate] = next(
        (t for t in installments if t.is_first_installment and t.includes_season_pass),
        None,
    )
    if first_with_pass is not None:
        if passes:
            selected.append((passes[0], first_with_pass.due_date))
    else:
        selected.extend((template, None) for template in passes)
    return selected


@transaction.atomic
def create_payments_for_registration(*, registration: TripRegistration) -> List[Payment]:
    """
    Create the payments a registration owes according to the trip templates.

    Args:
        registration: The registration to bill

    Returns:
        Created Payment instances
    """
    templates = list(registration.trip.payment_templates.all())
    birth_year = registration.participant.birth_date.year

    payments = [
        _payment_from_template(registration, template, due_date)
        for template, due_date in select_templates_for_birth_year(templates, birth_year)
    ]
    Payment.objects.bulk_create(payments)

    logger.info(
        "Created %s payment(s) for registration %s",
        len(payments), registration.id,
    )
    return payments


def cancel_pending_payments(*, registration: TripRegistration) -> int:
    """Cancel payments of a registration that have not received any money yet."""
    return (
        Payment.objects
        .filter(registration=registration, status__in=[PaymentStatus.PENDING, PaymentStatus.OVERDUE])
        .update(status=PaymentStatus.CANCELLED, updated_at=timezone.now())
    )


def cancel_registration_payments(*, registration: TripRegistration) -> int:
    """Cancel every payment of a registration."""
    return (
        Payment.objects
        .filter(registration=registration)
        .exclude(status=PaymentStatus.CANCELLED)
        .update(status=PaymentStatus.CANCELLED, updated_at=timezone.now())
    )


def has_open_payments(*, registration: TripRegistration) -> bool:
    """Whether the registration has any payment that is not cancelled."""
    return (
        Payment.objects
        .filter(registration=registration)
        .exclude(status=PaymentStatus.CANCELLED)
        .exists()
    )
