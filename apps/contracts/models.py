# ==========================================
# apps/contracts/models.py
# ==========================================

from django.conf import settings
from django.db import models
import uuid


class TripContractTemplate(models.Model):
    """Contract wording for a trip. Only an active template produces contracts."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.OneToOneField(
        'trips.Trip',
        on_delete=models.CASCADE,
        related_name='contract_template'
    )
    template_text = models.TextField()
    is_active = models.BooleanField(default=False)
    activated_at = models.DateTimeField(null=True, blank=True)
    activated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contract_templates_activated'
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contract_templates_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'trip_contract_templates'
        ordering = ['-updated_at']

    def __str__(self):
        state = 'active' if self.is_active else 'inactive'
        return f"Contract template for {self.trip.title} ({state})"


class TripContract(models.Model):
    """
    Contract of one child on one trip.

    The text is rendered once and frozen; acceptance by the parent is the
    electronic signature.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    trip = models.ForeignKey('trips.Trip', on_delete=models.CASCADE, related_name='contracts')
    participant = models.ForeignKey(
        'participants.Participant',
        on_delete=models.CASCADE,
        related_name='contracts'
    )
    registration = models.ForeignKey(
        'trips.TripRegistration',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contracts'
    )
    contract_text = models.TextField()
    contract_number = models.CharField(max_length=20, blank=True, db_index=True)

    accepted_at = models.DateTimeField(null=True, blank=True)
    accepted_by_parent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contracts_accepted'
    )
    accepted_name = models.CharField(max_length=120, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='contracts_created'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'trip_contracts'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['trip', 'participant'],
                name='unique_contract_per_trip_participant'
            ),
        ]
        indexes = [
            models.Index(fields=['trip', 'accepted_at']),
        ]

    def __str__(self):
        return f"Umowa {self.contract_number or '-'} - {self.participant.full_name}"

    @property
    def is_accepted(self):
        return self.accepted_at is not None
