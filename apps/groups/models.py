# ==========================================
# apps/groups/models.py
# ==========================================

from django.db import models
import uuid


class Group(models.Model):
    """Training group of the club (usually one per age band)."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    display_order = models.PositiveIntegerField(default=0)
    is_selectable_by_parent = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'groups'
        indexes = [
            models.Index(fields=['display_order']),
        ]
        ordering = ['display_order', 'name']

    def __str__(self):
        return self.name


class ParticipantGroup(models.Model):
    """Assignment of a child to a group. A child belongs to at most one group."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    participant = models.OneToOneField(
        'participants.Participant',
        on_delete=models.CASCADE,
        related_name='group_assignment'
    )
    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name='assignments'
    )
    assigned_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='group_assignments_made'
    )
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'participant_groups'
        indexes = [
            models.Index(fields=['group']),
        ]
        ordering = ['assigned_at']

    def __str__(self):
        return f"{self.participant} → {self.group}"
