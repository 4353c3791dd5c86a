"""
Service layer unit tests for payments app.

Tests cover:
- Status derivation
- Overdue refresh
- Daily reminders
"""

import pytest
from io import StringIO
from datetime import date, timedelta
from decimal import Decimal
from django.core import mail
from django.core.management import call_command
from django.utils import timezone

from apps.payments.models import Payment, PaymentStatus
from apps.payments.services import (
    add_transaction,
    apply_discount,
    finance_summary,
    mark_as_paid,
    refresh_overdue_statuses,
    send_payment_reminders,
    set_payment_status,
    PaymentCancelledError,
    InvalidPaymentOperationError,
)
from apps.payments.status import derive_payment_status
from apps.trips.models import ParticipationStatus


TODAY = date(2026, 10, 19)


@pytest.mark.parametrize('amount_paid,due_date,expected', [
    ('0', None, PaymentStatus.PENDING),
    ('0', TODAY, PaymentStatus.PENDING),
    ('0', TODAY - timedelta(days=1), PaymentStatus.OVERDUE),
    ('100', TODAY + timedelta(days=3), PaymentStatus.PARTIALLY_PAID),
    ('100', TODAY - timedelta(days=3), PaymentStatus.PARTIALLY_PAID_OVERDUE),
    ('500', TODAY - timedelta(days=3), PaymentStatus.PAID),
    ('650', None, PaymentStatus.PAID),
])
def test_derive_payment_status(amount_paid, due_date, expected):
    result = derive_payment_status(
        amount=Decimal('500'),
        amount_paid=Decimal(amount_paid),
        due_date=due_date,
        today=TODAY,
    )

    assert result == expected


def test_cancelled_is_never_derived_away():
    result = derive_payment_status(
        amount=Decimal('500'),
        amount_paid=Decimal('500'),
        due_date=None,
        today=TODAY,
        current_status=PaymentStatus.CANCELLED,
    )

    assert result == PaymentStatus.CANCELLED


@pytest.mark.django_db
class TestBookkeeping:

    def test_transaction_on_cancelled_payment(self, first_installment, admin_user):
        Payment.objects.filter(id=first_installment.id).update(status=PaymentStatus.CANCELLED)

        with pytest.raises(PaymentCancelledError):
            add_transaction(
                payment_id=first_installment.id,
                recorded_by=admin_user,
                amount=Decimal('10'),
                transaction_date=TODAY,
                payment_method='cash',
            )

    def test_discount_bounds(self, first_installment, admin_user):
        with pytest.raises(InvalidPaymentOperationError):
            apply_discount(
                payment_id=first_installment.id,
                discount_percentage=Decimal('-1'),
                applied_by=admin_user,
            )

    def test_discount_keeps_amount_paid(self, first_installment, admin_user):
        add_transaction(
            payment_id=first_installment.id,
            recorded_by=admin_user,
            amount=Decimal('400'),
            transaction_date=TODAY,
            payment_method='transfer',
        )

        payment = apply_discount(
            payment_id=first_installment.id,
            discount_percentage=Decimal('50'),
            applied_by=admin_user,
        )

        assert payment.amount == Decimal('400.00')
        assert payment.amount_paid == Decimal('400.00')
        assert payment.status == PaymentStatus.PAID
        assert payment.discount_applied_by == admin_user


@pytest.mark.django_db
class TestSetPaymentStatus:

    def test_paid_settles_and_mails(self, first_installment, admin_user, django_capture_on_commit_callbacks):
        mail.outbox.clear()

        with django_capture_on_commit_callbacks(execute=True):
            payment = set_payment_status(
                payment_id=first_installment.id,
                status=PaymentStatus.PAID,
                marked_by=admin_user,
            )

        assert payment.amount_paid == payment.amount
        assert payment.paid_at is not None
        assert payment.marked_by == admin_user
        assert len(mail.outbox) == 1

    def test_pending_resets_paid_amount(self, first_installment, admin_user):
        set_payment_status(payment_id=first_installment.id, status=PaymentStatus.PAID, marked_by=admin_user)

        payment = set_payment_status(
            payment_id=first_installment.id,
            status=PaymentStatus.PENDING,
            marked_by=admin_user,
        )

        payment.refresh_from_db()
        assert payment.status == PaymentStatus.PENDING
        assert payment.amount_paid == Decimal('0.00')
        assert payment.paid_at is None

    def test_other_status_stored_as_given(self, first_installment, admin_user):
        payment = set_payment_status(
            payment_id=first_installment.id,
            status=PaymentStatus.OVERDUE,
            marked_by=admin_user,
        )

        payment.refresh_from_db()
        assert payment.status == PaymentStatus.OVERDUE
        assert payment.amount_paid == Decimal('0.00')


@pytest.mark.django_db
class TestFinanceSummary:

    def test_totals_per_currency(self, trip, first_installment, admin_user):
        Payment.objects.filter(category_name='2014-2016').update(currency='EUR')
        mark_as_paid(payment_id=first_installment.id, marked_by=admin_user, payment_method='transfer')

        summary = finance_summary()

        assert len(summary['trips']) == 1
        row = summary['trips'][0]
        assert row['trip_id'] == trip.id
        assert row['participant_count'] == 1
        assert row['total_pln'] == Decimal('1500.00')
        assert row['paid_pln'] == Decimal('800.00')
        assert row['missing_pln'] == Decimal('700.00')
        assert row['total_eur'] == Decimal('250.00')
        assert row['paid_eur'] == Decimal('0.00')
        assert row['missing_eur'] == Decimal('250.00')
        assert (row['paid_payments'], row['total_payments'], row['paid_percent']) == (1, 3, 33)
        assert summary['totals']['trip_count'] == 1
        assert summary['totals']['missing_pln'] == Decimal('700.00')

    def test_partial_payment_not_collected(self, first_installment, admin_user):
        add_transaction(
            payment_id=first_installment.id,
            recorded_by=admin_user,
            amount=Decimal('300'),
            transaction_date=TODAY,
            payment_method='cash',
        )

        row = finance_summary()['trips'][0]

        assert row['paid_pln'] == Decimal('0.00')
        assert row['paid_payments'] == 0

    def test_cancelled_left_out(self, confirmed):
        Payment.objects.update(status=PaymentStatus.CANCELLED)

        summary = finance_summary()

        assert summary['trips'] == []
        assert summary['totals']['paid_percent'] == 0
        assert summary['totals']['total_pln'] == Decimal('0.00')

    def test_search_by_title(self, confirmed):
        assert len(finance_summary(search='zakopane')['trips']) == 1
        assert finance_summary(search='Białka')['trips'] == []


@pytest.mark.django_db
class TestRefreshOverdue:

    def test_marks_past_due_payments(self, first_installment):
        later = first_installment.due_date + timedelta(days=1)

        changed = refresh_overdue_statuses(today=later)

        assert changed == 1
        first_installment.refresh_from_db()
        assert first_installment.status == PaymentStatus.OVERDUE

    def test_leaves_cancelled_alone(self, first_installment):
        Payment.objects.update(status=PaymentStatus.CANCELLED)

        assert refresh_overdue_statuses(today=date(2099, 1, 1)) == 0


@pytest.mark.django_db
class TestPaymentReminders:

    def test_sends_for_payment_due_on_reminder_date(self, first_installment):
        today = first_installment.due_date - timedelta(days=3)
        mail.outbox.clear()

        result = send_payment_reminders(today=today, days_ahead=3)

        assert result == {
            'ok': True,
            'date': today.isoformat(),
            'reminder_date': first_installment.due_date.isoformat(),
            'sent': 1,
            'skipped': 0,
            'errors': 0,
        }
        assert len(mail.outbox) == 1
        assert 'Przypomnienie o płatności' in mail.outbox[0].subject
        assert '800' in mail.outbox[0].body

    def test_dry_run_sends_nothing(self, first_installment):
        today = first_installment.due_date - timedelta(days=3)
        mail.outbox.clear()

        result = send_payment_reminders(today=today, days_ahead=3, dry_run=True)

        assert result['sent'] == 1
        assert mail.outbox == []
        first_installment.refresh_from_db()
        assert first_installment.reminder_sent_at is None

    def test_skips_unconfirmed_registration(self, confirmed, first_installment):
        confirmed.participation_status = ParticipationStatus.OTHER
        confirmed.save()
        today = first_installment.due_date - timedelta(days=3)

        result = send_payment_reminders(today=today, days_ahead=3)

        assert result['sent'] == 0
        assert result['skipped'] == 1

    def test_paid_payment_not_reminded(self, first_installment):
        Payment.objects.filter(id=first_installment.id).update(
            status=PaymentStatus.PAID,
            amount_paid=first_installment.amount,
            paid_at=timezone.now(),
        )

        result = send_payment_reminders(today=first_installment.due_date - timedelta(days=3), days_ahead=3)

        assert result['sent'] == 0
        assert result['skipped'] == 0


@pytest.mark.django_db
class TestCommands:

    def test_send_payment_reminders_dry_run(self, first_installment):
        out = StringIO()
        call_command('send_payment_reminders', '--days', '10', '--dry-run', stdout=out)

        assert '1 to send' in out.getvalue()
        assert 'No e-mails sent' in out.getvalue()
