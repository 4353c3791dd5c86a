# ==========================================
# apps/payments/models.py
# ==========================================

from decimal import Decimal

from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.utils import timezone
import uuid

from apps.trips.models import PaymentType, Currency

from .status import PaymentStatus, derive_payment_status


class PaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    TRANSFER = 'transfer', 'Transfer'


OPEN_STATUSES = (
    PaymentStatus.PENDING,
    PaymentStatus.PARTIALLY_PAID,
    PaymentStatus.OVERDUE,
    PaymentStatus.PARTIALLY_PAID_OVERDUE,
)


class Payment(models.Model):
    """Amount owed for one registration (an installment or a season pass)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    registration = models.ForeignKey(
        'trips.TripRegistration',
        on_delete=models.CASCADE,
        related_name='payments'
    )
    template = models.ForeignKey(
        'trips.TripPaymentTemplate',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments'
    )
    payment_type = models.CharField(max_length=15, choices=PaymentType.choices)
    installment_number = models.PositiveSmallIntegerField(null=True, blank=True)
    category_name = models.CharField(max_length=100, blank=True)

    # Amounts
    original_amount = models.DecimalField(max_digits=10, decimal_places=2)
    discount_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.PLN)

    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=25,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING
    )
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_method_used = models.CharField(
        max_length=10,
        choices=PaymentMethod.choices,
        blank=True
    )
    admin_notes = models.TextField(blank=True)

    # Audit
    marked_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments_marked'
    )
    discount_applied_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='discounts_applied'
    )
    discount_applied_at = models.DateTimeField(null=True, blank=True)
    reminder_sent_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        indexes = [
            models.Index(fields=['registration', 'status']),
            models.Index(fields=['status', 'due_date']),
            models.Index(fields=['due_date']),
        ]
        ordering = ['due_date', 'installment_number']

    def __str__(self):
        return f"{self.label} - {self.amount} {self.currency} ({self.status})"

    @property
    def label(self):
        if self.payment_type == PaymentType.INSTALLMENT:
            return f"Rata {self.installment_number}" if self.installment_number else "Pełna opłata"
        return f"Karnet ({self.category_name})" if self.category_name else "Karnet"

    @property
    def remaining_amount(self):
        return max(Decimal('0.00'), self.amount - self.amount_paid)

    @property
    def is_open(self):
        return self.status in OPEN_STATUSES

    def refresh_status(self, today=None):
        """
        Re-derive status from amounts and due date.

        Sets paid_at when the payment becomes paid. Does not save.
        """
        self.status = derive_payment_status(
            amount=self.amount,
            amount_paid=self.amount_paid,
            due_date=self.due_date,
            today=today,
            current_status=self.status,
        )
        if self.status == PaymentStatus.PAID and self.paid_at is None:
            self.paid_at = timezone.now()
        elif self.status != PaymentStatus.PAID:
            self.paid_at = None
        return self.status


class PaymentTransaction(models.Model):
    """Money received towards a payment."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    payment = models.ForeignKey(
        Payment,
        on_delete=models.CASCADE,
        related_name='transactions'
    )
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01')), MaxValueValidator(Decimal('100000'))]
    )
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.PLN)
    transaction_date = models.DateField()
    payment_method = models.CharField(max_length=10, choices=PaymentMethod.choices)
    notes = models.CharField(max_length=500, blank=True)
    recorded_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payment_transactions_recorded'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payment_transactions'
        indexes = [
            models.Index(fields=['payment', 'transaction_date']),
        ]
        ordering = ['-transaction_date', '-created_at']

    def __str__(self):
        return f"{self.amount} {self.currency} on {self.transaction_date}"
