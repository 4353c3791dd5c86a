# ==========================================
# apps/trips/models.py
# ==========================================

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
import uuid


class TripStatus(models.TextChoices):
    DRAFT = 'draft', 'Draft'
    PUBLISHED = 'published', 'Published'
    CANCELLED = 'cancelled', 'Cancelled'
    COMPLETED = 'completed', 'Completed'


class PaymentType(models.TextChoices):
    INSTALLMENT = 'installment', 'Installment'
    SEASON_PASS = 'season_pass', 'Season pass'


class Currency(models.TextChoices):
    PLN = 'PLN', 'PLN'
    EUR = 'EUR', 'EUR'


class TemplatePaymentMethod(models.TextChoices):
    CASH = 'cash', 'Cash'
    TRANSFER = 'transfer', 'Transfer'
    BOTH = 'both', 'Cash or transfer'


class RegistrationType(models.TextChoices):
    PARENT = 'parent', 'Parent'
    ADMIN = 'admin', 'Admin'


class RegistrationStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    CANCELLED = 'cancelled', 'Cancelled'


class ParticipationStatus(models.TextChoices):
    UNCONFIRMED = 'unconfirmed', 'Unconfirmed'
    CONFIRMED = 'confirmed', 'Confirmed'
    NOT_GOING = 'not_going', 'Not going'
    OTHER = 'other', 'Other'


def default_bank_account_pln():
    return settings.DEFAULT_BANK_ACCOUNT_PLN


def default_bank_account_eur():
    return settings.DEFAULT_BANK_ACCOUNT_EUR


class Trip(models.Model):
    """Ski trip offered to one or more groups."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=200, blank=True)
    declaration_deadline = models.DateField(null=True, blank=True)

    # Departure
    departure_datetime = models.DateTimeField()
    departure_location = models.CharField(max_length=200)
    departure_stop2_datetime = models.DateTimeField(null=True, blank=True)
    departure_stop2_location = models.CharField(max_length=200, blank=True)

    # Return
    return_datetime = models.DateTimeField()
    return_location = models.CharField(max_length=200)
    return_stop2_datetime = models.DateTimeField(null=True, blank=True)
    return_stop2_location = models.CharField(max_length=200, blank=True)

    bank_account_pln = models.CharField(max_length=64, default=default_bank_account_pln)
    bank_account_eur = models.CharField(max_length=64, default=default_bank_account_eur)

    status = models.CharField(
        max_length=10,
        choices=TripStatus.choices,
        default=TripStatus.DRAFT
    )
    groups = models.ManyToManyField(
        'groups.Group',
        through='TripGroup',
        related_name='trips',
        blank=True
    )
    created_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='trips_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'trips'
        indexes = [
            models.Index(fields=['status', 'departure_datetime']),
            models.Index(fields=['departure_datetime']),
        ]
        ordering = ['-departure_datetime']

    def __str__(self):
        return self.title

    @property
    def is_published(self):
        return self.status == TripStatus.PUBLISHED

    def has_group(self, group):
        if group is None:
            return False
        return self.trip_groups.filter(group=group).exists()


class TripGroup(models.Model):
    """Group a trip is offered to."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='trip_groups')
    group = models.ForeignKey('groups.Group', on_delete=models.CASCADE, related_name='trip_groups')

    class Meta:
        db_table = 'trip_groups'
        unique_together = [['trip', 'group']]

    def __str__(self):
        return f"{self.trip} / {self.group}"


class TripPaymentTemplate(models.Model):
    """Planned payment of a trip, copied into payments on registration."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='payment_templates')
    payment_type = models.CharField(max_length=15, choices=PaymentType.choices)

    # Installments
    installment_number = models.PositiveSmallIntegerField(null=True, blank=True)
    is_first_installment = models.BooleanField(default=False)
    includes_season_pass = models.BooleanField(default=False)

    # Season passes
    category_name = models.CharField(max_length=100, blank=True)
    birth_year_from = models.PositiveSmallIntegerField(null=True, blank=True)
    birth_year_to = models.PositiveSmallIntegerField(null=True, blank=True)

    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01')), MaxValueValidator(Decimal('100000'))]
    )
    currency = models.CharField(max_length=3, choices=Currency.choices, default=Currency.PLN)
    due_date = models.DateField(null=True, blank=True)
    payment_method = models.CharField(
        max_length=10,
        choices=TemplatePaymentMethod.choices,
        default=TemplatePaymentMethod.TRANSFER
    )

    class Meta:
        db_table = 'trip_payment_templates'
        ordering = ['payment_type', 'installment_number', 'birth_year_from']

    def __str__(self):
        return f"{self.label} - {self.amount} {self.currency}"

    @property
    def label(self):
        if self.payment_type == PaymentType.INSTALLMENT:
            return f"Rata {self.installment_number}" if self.installment_number else "Pełna opłata"
        return f"Karnet ({self.category_name})" if self.category_name else "Karnet"

    def matches_birth_year(self, year):
        """Season-pass range check. A missing bound leaves that side open."""
        if self.birth_year_from is not None and year < self.birth_year_from:
            return False
        if self.birth_year_to is not None and year > self.birth_year_to:
            return False
        return True


class TripRegistration(models.Model):
    """A child's registration on a trip."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey(Trip, on_delete=models.CASCADE, related_name='registrations')
    participant = models.ForeignKey(
        'participants.Participant',
        on_delete=models.CASCADE,
        related_name='registrations'
    )
    registered_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='registrations_made'
    )
    registration_type = models.CharField(
        max_length=10,
        choices=RegistrationType.choices,
        default=RegistrationType.PARENT
    )
    is_outside_group = models.BooleanField(default=False)
    status = models.CharField(
        max_length=10,
        choices=RegistrationStatus.choices,
        default=RegistrationStatus.ACTIVE
    )
    participation_status = models.CharField(
        max_length=15,
        choices=ParticipationStatus.choices,
        default=ParticipationStatus.UNCONFIRMED
    )
    participation_note = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'trip_registrations'
        unique_together = [['trip', 'participant']]
        indexes = [
            models.Index(fields=['trip', 'status']),
            models.Index(fields=['participant', 'status']),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.participant} @ {self.trip}"

    @property
    def is_active(self):
        return self.status == RegistrationStatus.ACTIVE
