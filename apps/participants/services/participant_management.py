"""
Participant (child) management service.

Parents manage their own children, admins manage everyone's.
"""

import logging
from datetime import date
from typing import Dict, Iterable, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet, Prefetch

from apps.accounts.models import User
from apps.groups.models import Group, ParticipantGroup
from apps.participants.models import Participant, ParticipantCustomField
from apps.trips.models import TripRegistration, RegistrationStatus

from .exceptions import (
    ParticipantNotFoundError,
    NotParticipantOwnerError,
    InvalidGroupError,
    ActiveRegistrationsError,
)

logger = logging.getLogger(__name__)

# Sentinel for "group not given" so None can mean "clear the group".
UNCHANGED = object()


def _resolve_group(group_id: UUID, user: User) -> Group:
    try:
        group = Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise InvalidGroupError(f"Group with ID {group_id} not found")
    if not user.is_admin and not group.is_selectable_by_parent:
        raise InvalidGroupError("This group cannot be selected by parents")
    return group


def _set_group(participant: Participant, group: Optional[Group], assigned_by: User) -> None:
    ParticipantGroup.objects.filter(participant=participant).delete()
    if group is None:
        # Drop the cached assignment
        participant.refresh_from_db()
    else:
        ParticipantGroup.objects.create(
            participant=participant,
            group=group,
            assigned_by=assigned_by,
        )


def _replace_custom_fields(participant: Participant, custom_fields: Dict[str, object]) -> None:
    participant.custom_fields.all().delete()
    ParticipantCustomField.objects.bulk_create([
        ParticipantCustomField(
            participant=participant,
            field_name=name,
            field_value='' if value is None else str(value),
        )
        for name, value in custom_fields.items()
    ])


def list_participants_for_user(*, user: User) -> QuerySet:
    """Children visible to the user: own children for parents, all for admins."""
    qs = (
        Participant.objects
        .select_related('parent', 'group_assignment__group')
        .prefetch_related('custom_fields')
    )
    if not user.is_admin:
        qs = qs.filter(parent=user)
    return qs.order_by('last_name', 'first_name')


def get_participant_for_user(*, participant_id: UUID, user: User) -> Participant:
    """
    Get a child the user may access.

    Raises:
        ParticipantNotFoundError: If the child doesn't exist
        NotParticipantOwnerError: If a parent asks for someone else's child
    """
    try:
        participant = (
            Participant.objects
            .select_related('parent', 'group_assignment__group')
            .get(id=participant_id)
        )
    except Participant.DoesNotExist:
        raise ParticipantNotFoundError(f"Participant with ID {participant_id} not found")

    if not user.is_admin and not participant.is_owned_by(user):
        raise NotParticipantOwnerError("You can only access your own children")
    return participant


@transaction.atomic
def create_participant(
    *,
    parent: User,
    first_name: str,
    last_name: str,
    birth_date: date,
    height_cm: Optional[int] = None,
    notes: str = '',
    group_id: Optional[UUID] = None,
    custom_fields: Optional[Dict[str, object]] = None,
) -> Participant:
    """
    Create a child owned by ``parent``.

    Args:
        parent: Owning parent (the requesting user)
        first_name: Child's first name
        last_name: Child's last name
        birth_date: Date of birth
        height_cm: Optional height
        notes: Optional notes
        group_id: Optional group to assign
        custom_fields: Optional map of extra field values

    Returns:
        Created Participant

    Raises:
        InvalidGroupError: If the group is missing or not selectable
    """
    group = _resolve_group(group_id, parent) if group_id else None

    participant = Participant.objects.create(
        parent=parent,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        birth_date=birth_date,
        height_cm=height_cm,
        notes=notes,
    )
    if group is not None:
        _set_group(participant, group, assigned_by=parent)
    if custom_fields:
        _replace_custom_fields(participant, custom_fields)

    logger.info("Created participant %s for %s", participant.id, parent.email)
    return participant


@transaction.atomic
def update_participant(
    *,
    participant_id: UUID,
    user: User,
    group_id=UNCHANGED,
    custom_fields: Optional[Dict[str, object]] = None,
    **fields,
) -> Participant:
    """
    Update a child. Only the owning parent or an admin may do it.

    ``group_id`` replaces the assignment when given (None clears it).
    ``custom_fields`` replaces all extra values when given.
    """
    participant = get_participant_for_user(participant_id=participant_id, user=user)

    editable = ('first_name', 'last_name', 'birth_date', 'height_cm', 'notes')
    for name in editable:
        if name in fields:
            setattr(participant, name, fields[name])
    participant.save()

    if group_id is not UNCHANGED:
        group = _resolve_group(group_id, user) if group_id else None
        _set_group(participant, group, assigned_by=user)

    if custom_fields is not None:
        _replace_custom_fields(participant, custom_fields)

    return participant


@transaction.atomic
def delete_participants(*, participant_ids: Iterable[UUID], user: User) -> Dict[str, int]:
    """
    Delete children that have no active trip registration.

    Parents may only delete their own children. Cancelled registrations
    are removed together with the child.

    Returns:
        {'deleted': int, 'deleted_registrations': int}

    Raises:
        ParticipantNotFoundError: If none of the ids exist
        NotParticipantOwnerError: If a parent targets another parent's child
        ActiveRegistrationsError: If any child is still actively registered
    """
    participants = list(
        Participant.objects.select_for_update().filter(id__in=list(participant_ids))
    )
    if not participants:
        raise ParticipantNotFoundError("No matching participants found")

    if not user.is_admin and any(not p.is_owned_by(user) for p in participants):
        raise NotParticipantOwnerError("You can only delete your own children")

    ids = [p.id for p in participants]
    blocked = (
        TripRegistration.objects
        .filter(participant_id__in=ids, status=RegistrationStatus.ACTIVE)
        .values('participant')
        .distinct()
        .count()
    )
    if blocked:
        raise ActiveRegistrationsError(
            f"Cannot delete {blocked} participant(s) with active trip registrations"
        )

    registrations = TripRegistration.objects.filter(participant_id__in=ids).count()
    deleted = len(ids)
    Participant.objects.filter(id__in=ids).delete()
    logger.info("Deleted %s participant(s) by %s", deleted, user.email)

    return {'deleted': deleted, 'deleted_registrations': registrations}


@transaction.atomic
def assign_group(*, participant_id: UUID, group_id: Optional[UUID], assigned_by: User) -> Participant:
    """
    Set or clear a child's group (admin).

    Raises:
        ParticipantNotFoundError: If the child doesn't exist
        InvalidGroupError: If the group doesn't exist
    """
    participant = get_participant_for_user(participant_id=participant_id, user=assigned_by)
    group = _resolve_group(group_id, assigned_by) if group_id else None
    _set_group(participant, group, assigned_by=assigned_by)
    return participant


@transaction.atomic
def update_note(*, participant_id: UUID, user: User, notes: str) -> Participant:
    """Replace the notes of a child (owning parent or admin)."""
    participant = get_participant_for_user(participant_id=participant_id, user=user)
    participant.notes = notes
    participant.save(update_fields=['notes', 'updated_at'])
    return participant


def get_participant_registrations(*, participant_id: UUID, user: User) -> QuerySet:
    """Active trip registrations of a child, newest trip first."""
    participant = get_participant_for_user(participant_id=participant_id, user=user)
    return (
        TripRegistration.objects
        .filter(participant=participant, status=RegistrationStatus.ACTIVE)
        .select_related('trip')
        .order_by('-trip__departure_datetime')
    )
