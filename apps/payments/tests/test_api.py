import pytest
from datetime import timedelta
from decimal import Decimal
from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.payments.models import Payment, PaymentTransaction, PaymentStatus
from apps.trips.models import ParticipationStatus
from apps.trips.services import set_participation_status


def payment_url(name, payment):
    return reverse(f'payments:payment-{name}', args=[payment.id])


# =============================================================================
# List / Retrieve Tests
# =============================================================================

@pytest.mark.django_db
class TestPaymentList:
    """Tests for GET /api/payments/"""

    def test_admin_lists_all(self, admin_client, payments):
        """Admin sees every payment with its label."""
        response = admin_client.get(reverse('payments:payment-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 3
        assert {row['label'] for row in response.data['results']} == {
            'Rata 1', 'Rata 2', 'Karnet (2014-2016)',
        }

    def test_filter_by_status(self, admin_client, payments, first_installment):
        """Status filter narrows the list."""
        Payment.objects.filter(id=first_installment.id).update(status=PaymentStatus.PAID)

        response = admin_client.get(reverse('payments:payment-list'), {'status': 'paid'})

        assert response.data['count'] == 1
        assert response.data['results'][0]['id'] == str(first_installment.id)

    def test_invalid_filter(self, admin_client):
        response = admin_client.get(reverse('payments:payment-list'), {'status': 'lost'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_parent_cannot_list(self, parent_client, payments):
        """The full list is admin only."""
        response = parent_client.get(reverse('payments:payment-list'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_parent_retrieves_own_payment_with_account(self, parent_client, first_installment):
        """Parent view carries the bank account and hides admin notes."""
        response = parent_client.get(payment_url('detail', first_installment))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['bank_account']
        assert 'admin_notes' not in response.data

    def test_other_parent_gets_404(self, other_parent_client, first_installment):
        """Payments of other families are not visible."""
        response = other_parent_client.get(payment_url('detail', first_installment))

        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Admin Bookkeeping Tests
# =============================================================================

@pytest.mark.django_db
class TestAddTransaction:
    """Tests for POST /api/payments/{id}/add-transaction/"""

    def test_partial_then_full(self, admin_client, first_installment):
        """Transactions move the payment through partial to paid."""
        url = payment_url('add-transaction', first_installment)
        today = timezone.localdate().isoformat()

        response = admin_client.post(url, {
            'amount': '300.00',
            'transaction_date': today,
            'payment_method': 'transfer',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        first_installment.refresh_from_db()
        assert first_installment.amount_paid == Decimal('300.00')
        assert first_installment.status == PaymentStatus.PARTIALLY_PAID

        admin_client.post(url, {
            'amount': '500.00',
            'transaction_date': today,
            'payment_method': 'cash',
        }, format='json')

        first_installment.refresh_from_db()
        assert first_installment.status == PaymentStatus.PAID
        assert first_installment.paid_at is not None
        assert first_installment.payment_method_used == 'cash'

    def test_currency_mismatch(self, admin_client, first_installment):
        """Money in another currency is rejected."""
        response = admin_client.post(payment_url('add-transaction', first_installment), {
            'amount': '100.00',
            'transaction_date': timezone.localdate().isoformat(),
            'payment_method': 'transfer',
            'currency': 'EUR',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not PaymentTransaction.objects.exists()

    def test_zero_amount_rejected(self, admin_client, first_installment):
        response = admin_client.post(payment_url('add-transaction', first_installment), {
            'amount': '0',
            'transaction_date': timezone.localdate().isoformat(),
            'payment_method': 'transfer',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_transactions_visible_to_owner(self, admin_client, parent_client, first_installment):
        """The owning parent can read the transactions."""
        admin_client.post(payment_url('add-transaction', first_installment), {
            'amount': '50.00',
            'transaction_date': timezone.localdate().isoformat(),
            'payment_method': 'cash',
            'notes': 'Gotówka na zbiórce',
        }, format='json')

        response = parent_client.get(payment_url('transactions', first_installment))

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['notes'] == 'Gotówka na zbiórce'
        assert response.data[0]['recorded_by_email'] == 'admin@biegunsport.pl'


@pytest.mark.django_db
class TestMarkPaid:
    """Tests for POST /api/payments/{id}/mark-paid/"""

    def test_settles_remaining_and_mails_parent(
        self, admin_client, first_installment, django_capture_on_commit_callbacks
    ):
        """Mark-paid records the rest and e-mails the parent."""
        Payment.objects.filter(id=first_installment.id).update(amount_paid=Decimal('200.00'))
        mail.outbox.clear()

        with django_capture_on_commit_callbacks(execute=True):
            response = admin_client.post(payment_url('mark-paid', first_installment), {}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == PaymentStatus.PAID
        record = PaymentTransaction.objects.get(payment=first_installment)
        assert record.amount == Decimal('600.00')
        assert record.notes == 'Oznaczone jako opłacone przez admina'
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['parent@example.com']
        assert 'Płatność przyjęta' in mail.outbox[0].subject

    def test_already_paid(self, admin_client, first_installment):
        """A paid payment cannot be marked again."""
        admin_client.post(payment_url('mark-paid', first_installment), {}, format='json')
        response = admin_client.post(payment_url('mark-paid', first_installment), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_cancelled(self, admin_client, first_installment):
        Payment.objects.filter(id=first_installment.id).update(status=PaymentStatus.CANCELLED)

        response = admin_client.post(payment_url('mark-paid', first_installment), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_missing_payment(self, admin_client):
        """Unknown id returns 404."""
        url = reverse('payments:payment-mark-paid', args=['00000000-0000-0000-0000-000000000000'])
        response = admin_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_parent_forbidden(self, parent_client, first_installment):
        response = parent_client.post(payment_url('mark-paid', first_installment), {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestAdminAdjustments:

    def test_discount_from_original_amount(self, admin_client, first_installment):
        """Discounts never stack."""
        url = payment_url('discount', first_installment)
        admin_client.post(url, {'discount_percentage': '50'}, format='json')
        response = admin_client.post(url, {'discount_percentage': '15'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data['amount']) == Decimal('680.00')
        assert Decimal(response.data['original_amount']) == Decimal('800.00')

    def test_discount_rounds_half_up(self, admin_client, payments):
        """Discounted amount is rounded half up to the grosz."""
        season_pass = payments['Karnet (2014-2016)']
        response = admin_client.post(payment_url('discount', season_pass), {'discount_percentage': '33.33'}, format='json')

        assert Decimal(response.data['amount']) == Decimal('166.68')

    def test_discount_out_of_range(self, admin_client, first_installment):
        response = admin_client.post(payment_url('discount', first_installment), {'discount_percentage': '120'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_full_discount_makes_payment_paid(self, admin_client, first_installment):
        """A 100% discount settles the payment."""
        response = admin_client.post(payment_url('discount', first_installment), {'discount_percentage': '100'}, format='json')

        assert response.data['status'] == PaymentStatus.PAID

    def test_status_override_paid_then_pending(self, admin_client, first_installment, django_capture_on_commit_callbacks):
        """Manual paid settles the amount and mails the parent, pending resets it."""
        url = payment_url('set-status', first_installment)
        mail.outbox.clear()

        with django_capture_on_commit_callbacks(execute=True):
            response = admin_client.patch(url, {'status': 'paid'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == PaymentStatus.PAID
        assert Decimal(response.data['amount_paid']) == Decimal('800.00')
        assert len(mail.outbox) == 1
        assert 'Płatność przyjęta' in mail.outbox[0].subject

        response = admin_client.patch(url, {'status': 'pending'}, format='json')
        assert response.data['status'] == PaymentStatus.PENDING
        assert Decimal(response.data['amount_paid']) == Decimal('0.00')
        assert response.data['paid_at'] is None

    def test_amount_change_rederives_status(self, admin_client, first_installment):
        """Lowering the amount can settle the payment."""
        Payment.objects.filter(id=first_installment.id).update(amount_paid=Decimal('500.00'))

        response = admin_client.patch(payment_url('amount', first_installment), {'amount': '500.00'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == PaymentStatus.PAID

    def test_admin_note(self, admin_client, first_installment):
        response = admin_client.patch(
            payment_url('note', first_installment),
            {'admin_notes': 'Zapłaci na zbiórce'},
            format='json',
        )

        assert response.data['admin_notes'] == 'Zapłaci na zbiórce'


# =============================================================================
# Parent Views Tests
# =============================================================================

@pytest.mark.django_db
class TestParentPayments:

    def test_my_payments_confirmed_only(self, parent_client, payments, trip, participant, parent_user):
        """Only confirmed participation shows up for parents."""
        response = parent_client.get(reverse('payments:my-payments'))
        assert len(response.data) == 3

        set_participation_status(
            trip_id=trip.id,
            participant_id=participant.id,
            user=parent_user,
            participation_status=ParticipationStatus.NOT_GOING,
        )

        response = parent_client.get(reverse('payments:my-payments'))
        assert response.data == []

    def test_my_payments_filter_by_child(self, parent_client, payments, participant):
        """Parents can narrow the list to one child."""
        response = parent_client.get(reverse('payments:my-payments'), {'participant_id': str(participant.id)})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 3

    def test_my_payments_malformed_child_id(self, parent_client, payments):
        """A child id that is not a UUID is a 400, not a server error."""
        response = parent_client.get(reverse('payments:my-payments'), {'participant_id': 'not-a-uuid'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'participant_id' in response.data

    def test_my_payments_admin_forbidden(self, admin_client):
        response = admin_client.get(reverse('payments:my-payments'))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_bank_accounts_from_trip(self, parent_client, payments, trip):
        """Accounts come from the trip the child is confirmed on."""
        trip.bank_account_pln = '11 2222 3333 4444 5555 6666 7777'
        trip.save()

        response = parent_client.get(reverse('payments:bank-accounts'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['bank_account_pln'] == '11 2222 3333 4444 5555 6666 7777'

    def test_bank_accounts_default(self, parent_client, settings):
        """Without a confirmed trip the club accounts are used."""
        settings.DEFAULT_BANK_ACCOUNT_EUR = 'PL00 0000'

        response = parent_client.get(reverse('payments:bank-accounts'))

        assert response.data['bank_account_eur'] == 'PL00 0000'


# =============================================================================
# Cron Endpoint Tests
# =============================================================================

@pytest.mark.django_db
class TestReminderCron:
    """Tests for GET /api/cron/payment-reminders"""

    def test_requires_secret_when_set(self, api_client, settings):
        """Cron endpoint checks the bearer secret."""
        settings.CRON_SECRET = 's3cret'

        response = api_client.get(reverse('cron-payment-reminders'))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

        response = api_client.get(reverse('cron-payment-reminders'), HTTP_AUTHORIZATION='Bearer wrong')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

        response = api_client.get(reverse('cron-payment-reminders'), HTTP_AUTHORIZATION='Bearer s3cret')
        assert response.status_code == status.HTTP_200_OK

    def test_sends_reminders(self, api_client, settings, first_installment):
        """Payments due in the configured window get a reminder."""
        settings.CRON_SECRET = ''
        settings.PAYMENT_REMINDER_DAYS_AHEAD = 10
        mail.outbox.clear()

        response = api_client.get(reverse('cron-payment-reminders'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['ok'] is True
        assert response.data['sent'] == 1
        assert response.data['reminder_date'] == first_installment.due_date.isoformat()
        assert len(mail.outbox) == 1
        first_installment.refresh_from_db()
        assert first_installment.reminder_sent_at is not None

    def test_refreshes_overdue(self, api_client, settings, first_installment):
        """Cron run marks past-due payments overdue."""
        settings.CRON_SECRET = ''
        Payment.objects.filter(id=first_installment.id).update(
            due_date=timezone.localdate() - timedelta(days=1)
        )

        api_client.get(reverse('cron-payment-reminders'))

        first_installment.refresh_from_db()
        assert first_installment.status == PaymentStatus.OVERDUE


@pytest.mark.django_db
class TestFinanceSummary:
    """Tests for GET /api/payments/summary/"""

    def test_summary_per_trip(self, admin_client, payments, trip):
        """Admin sees collected and missing money per trip."""
        admin_client.post(payment_url('mark-paid', payments['Rata 1']), {}, format='json')

        response = admin_client.get(reverse('payments:payment-summary'))

        assert response.status_code == status.HTTP_200_OK
        row = response.data['trips'][0]
        assert row['trip_id'] == str(trip.id)
        assert row['trip_title'] == 'Obóz Zakopane'
        assert Decimal(row['total_pln']) == Decimal('1750.00')
        assert Decimal(row['paid_pln']) == Decimal('800.00')
        assert Decimal(row['missing_pln']) == Decimal('950.00')
        assert row['paid_payments'] == 1
        assert row['total_payments'] == 3
        assert response.data['totals']['trip_count'] == 1

    def test_search(self, admin_client, payments):
        """Search narrows the summary by trip title."""
        response = admin_client.get(reverse('payments:payment-summary'), {'search': 'Białka'})

        assert response.data['trips'] == []
        assert response.data['totals']['total_payments'] == 0

    def test_parent_forbidden(self, parent_client, payments):
        """The summary is admin only."""
        response = parent_client.get(reverse('payments:payment-summary'))

        assert response.status_code == status.HTTP_403_FORBIDDEN
