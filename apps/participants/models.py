# ==========================================
# apps/participants/models.py
# ==========================================

from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
import uuid


class CustomFieldType(models.TextChoices):
    TEXT = 'text', 'Text'
    NUMBER = 'number', 'Number'
    DATE = 'date', 'Date'
    BOOLEAN = 'boolean', 'Yes/No'
    SELECT = 'select', 'Select'


class Participant(models.Model):
    """Child registered in the club by a parent."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    parent = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='participants'
    )
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    birth_date = models.DateField()
    height_cm = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(250)]
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'participants'
        indexes = [
            models.Index(fields=['parent']),
            models.Index(fields=['last_name', 'first_name']),
        ]
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def group(self):
        """Assigned group or None."""
        assignment = getattr(self, 'group_assignment', None)
        return assignment.group if assignment else None

    def is_owned_by(self, user):
        return self.parent_id == user.id


class ParticipantCustomField(models.Model):
    """Free-form extra value attached to a child."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    participant = models.ForeignKey(
        Participant,
        on_delete=models.CASCADE,
        related_name='custom_fields'
    )
    field_name = models.CharField(max_length=100)
    field_value = models.TextField(blank=True)

    class Meta:
        db_table = 'participant_custom_fields'
        unique_together = [['participant', 'field_name']]
        ordering = ['field_name']

    def __str__(self):
        return f"{self.field_name}={self.field_value}"


class CustomFieldDefinition(models.Model):
    """Admin-defined extra field shown on the child form."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    field_name = models.SlugField(max_length=100, unique=True)
    field_label = models.CharField(max_length=200)
    field_type = models.CharField(
        max_length=10,
        choices=CustomFieldType.choices,
        default=CustomFieldType.TEXT
    )
    options = models.JSONField(default=list, blank=True)
    is_required = models.BooleanField(default=False)
    display_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'custom_field_definitions'
        ordering = ['display_order', 'field_name']

    def __str__(self):
        return self.field_label
