from decimal import Decimal

from rest_framework import serializers

from apps.trips.models import Currency

from .models import Payment, PaymentTransaction, PaymentMethod, PaymentStatus


# =============================================================================
# Input Serializers
# =============================================================================

class PaymentFilterSerializer(serializers.Serializer):
    """Query parameters of the admin payment list."""

    trip_id = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(choices=PaymentStatus.choices, required=False)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)
    participant_id = serializers.UUIDField(required=False)


class ParentPaymentFilterSerializer(serializers.Serializer):
    """Query parameters of the parent payment list."""

    participant_id = serializers.UUIDField(required=False)


class FinanceSummaryFilterSerializer(serializers.Serializer):
    search = serializers.CharField(required=False, allow_blank=True, max_length=200, default='')


class TransactionCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.01'),
        max_value=Decimal('100000')
    )
    transaction_date = serializers.DateField()
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    currency = serializers.ChoiceField(choices=Currency.choices, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500, default='')


class MarkPaidSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices, default=PaymentMethod.TRANSFER)


class DiscountSerializer(serializers.Serializer):
    discount_percentage = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal('0'),
        max_value=Decimal('100')
    )


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PaymentStatus.choices)


class PaymentAmountSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))


class PaymentNoteSerializer(serializers.Serializer):
    admin_notes = serializers.CharField(allow_blank=True, max_length=2000)


# =============================================================================
# Output Serializers
# =============================================================================

class PaymentSerializer(serializers.ModelSerializer):
    """Payment with trip and child context."""

    label = serializers.CharField(read_only=True)
    remaining_amount = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    trip_id = serializers.UUIDField(source='registration.trip_id', read_only=True)
    trip_title = serializers.CharField(source='registration.trip.title', read_only=True)
    participant_id = serializers.UUIDField(source='registration.participant_id', read_only=True)
    participant_name = serializers.CharField(source='registration.participant.full_name', read_only=True)
    parent_email = serializers.EmailField(source='registration.participant.parent.email', read_only=True)
    payment_method = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            'id',
            'label',
            'payment_type',
            'installment_number',
            'category_name',
            'original_amount',
            'discount_percentage',
            'amount',
            'amount_paid',
            'remaining_amount',
            'currency',
            'due_date',
            'status',
            'paid_at',
            'payment_method',
            'payment_method_used',
            'admin_notes',
            'trip_id',
            'trip_title',
            'participant_id',
            'participant_name',
            'parent_email',
            'reminder_sent_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_payment_method(self, obj):
        return obj.template.payment_method if obj.template_id and obj.template else None


class ParentPaymentSerializer(PaymentSerializer):
    """Payment as shown to the parent, with the account to pay into."""

    bank_account = serializers.SerializerMethodField()

    class Meta(PaymentSerializer.Meta):
        fields = [
            f for f in PaymentSerializer.Meta.fields
            if f not in ('admin_notes', 'parent_email')
        ] + ['bank_account']
        read_only_fields = fields

    def get_bank_account(self, obj):
        trip = obj.registration.trip
        if obj.currency == Currency.EUR:
            return trip.bank_account_eur
        return trip.bank_account_pln


class PaymentTransactionSerializer(serializers.ModelSerializer):
    recorded_by_email = serializers.EmailField(source='recorded_by.email', read_only=True, default=None)

    class Meta:
        model = PaymentTransaction
        fields = [
            'id',
            'payment',
            'amount',
            'currency',
            'transaction_date',
            'payment_method',
            'notes',
            'recorded_by_email',
            'created_at',
        ]
        read_only_fields = fields


class BankAccountsSerializer(serializers.Serializer):
    bank_account_pln = serializers.CharField()
    bank_account_eur = serializers.CharField()


class ReminderResultSerializer(serializers.Serializer):
    ok = serializers.BooleanField()
    date = serializers.CharField()
    reminder_date = serializers.CharField()
    sent = serializers.IntegerField()
    skipped = serializers.IntegerField()
    errors = serializers.IntegerField()


class TripFinanceSerializer(serializers.Serializer):
    trip_id = serializers.UUIDField()
    trip_title = serializers.CharField()
    departure_datetime = serializers.DateTimeField()
    participant_count = serializers.IntegerField()
    total_pln = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_pln = serializers.DecimalField(max_digits=12, decimal_places=2)
    missing_pln = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_eur = serializers.DecimalField(max_digits=12, decimal_places=2)
    paid_eur = serializers.DecimalField(max_digits=12, decimal_places=2)
    missing_eur = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_payments = serializers.IntegerField()
    paid_payments = serializers.IntegerField()
    paid_percent = serializers.IntegerField()


class FinanceTotalsSerializer(serializers.Serializer):
    trip_count = serializers.IntegerField()
    participant_count = serializers.IntegerField()
    total_pln = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_pln = serializers.DecimalField(max_digits=14, decimal_places=2)
    missing_pln = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_eur = serializers.DecimalField(max_digits=14, decimal_places=2)
    paid_eur = serializers.DecimalField(max_digits=14, decimal_places=2)
    missing_eur = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_payments = serializers.IntegerField()
    paid_payments = serializers.IntegerField()
    paid_percent = serializers.IntegerField()


class FinanceSummarySerializer(serializers.Serializer):
    trips = TripFinanceSerializer(many=True)
    totals = FinanceTotalsSerializer()
