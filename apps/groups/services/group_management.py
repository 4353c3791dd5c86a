"""
Group management service.

Handles group CRUD operations with proper transaction safety.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Max, QuerySet

from apps.accounts.models import User
from apps.groups.models import Group, ParticipantGroup

from .exceptions import (
    GroupNotFoundError,
    DuplicateGroupNameError,
)

logger = logging.getLogger(__name__)


def _ensure_unique_name(name: str, exclude_id: Optional[UUID] = None) -> None:
    qs = Group.objects.filter(name__iexact=name)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise DuplicateGroupNameError("A group with this name already exists")


@transaction.atomic
def create_group(
    *,
    name: str,
    description: str = '',
    is_selectable_by_parent: bool = True,
) -> Group:
    """
    Create a new group at the end of the display order.

    Args:
        name: Group name (trimmed, unique case-insensitively)
        description: Optional description
        is_selectable_by_parent: Whether parents may pick it for their child

    Returns:
        Created Group instance

    Raises:
        DuplicateGroupNameError: If the name is already taken
    """
    name = name.strip()
    _ensure_unique_name(name)

    max_order = Group.objects.aggregate(max_order=Max('display_order'))['max_order']
    group = Group.objects.create(
        name=name,
        description=description,
        display_order=(max_order or 0) + 1,
        is_selectable_by_parent=is_selectable_by_parent,
    )
    logger.info("Created group %s", group.name)
    return group


def get_group_by_id(*, group_id: UUID) -> Group:
    """
    Get a group by ID.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    try:
        return Group.objects.get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")


@transaction.atomic
def rename_group(*, group_id: UUID, name: str) -> Group:
    """
    Rename a group.

    Raises:
        GroupNotFoundError: If group doesn't exist
        DuplicateGroupNameError: If another group already has the name
    """
    try:
        group = Group.objects.select_for_update().get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    name = name.strip()
    _ensure_unique_name(name, exclude_id=group.id)

    group.name = name
    group.save(update_fields=['name', 'updated_at'])
    return group


@transaction.atomic
def update_group(
    *,
    group_id: UUID,
    name: Optional[str] = None,
    description: Optional[str] = None,
    display_order: Optional[int] = None,
    is_selectable_by_parent: Optional[bool] = None,
) -> Group:
    """
    Update group details.

    Uses select_for_update to prevent concurrent modifications.

    Raises:
        GroupNotFoundError: If group doesn't exist
        DuplicateGroupNameError: If the new name is taken
    """
    if name is not None:
        rename_group(group_id=group_id, name=name)

    try:
        group = Group.objects.select_for_update().get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    if description is not None:
        group.description = description
    if display_order is not None:
        group.display_order = display_order
    if is_selectable_by_parent is not None:
        group.is_selectable_by_parent = is_selectable_by_parent

    group.save()
    return group


@transaction.atomic
def delete_group(*, group_id: UUID) -> None:
    """
    Delete a group together with its child and trip assignments.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    from apps.trips.models import TripGroup

    try:
        group = Group.objects.select_for_update().get(id=group_id)
    except Group.DoesNotExist:
        raise GroupNotFoundError(f"Group with ID {group_id} not found")

    ParticipantGroup.objects.filter(group=group).delete()
    TripGroup.objects.filter(group=group).delete()
    logger.info("Deleting group %s", group.name)
    group.delete()


def list_groups_for_user(*, user: User) -> QuerySet:
    """
    Groups visible to a user, annotated with participant counts.

    Admins see every group, parents only the selectable ones.
    """
    qs = Group.objects.annotate(participants_count=Count('assignments'))
    if not user.is_admin:
        qs = qs.filter(is_selectable_by_parent=True)
    return qs.order_by('display_order', 'name')


def get_group_participants(*, group_id: UUID) -> QuerySet:
    """
    Children assigned to a group with their parents.

    Raises:
        GroupNotFoundError: If group doesn't exist
    """
    from apps.participants.models import Participant

    group = get_group_by_id(group_id=group_id)
    return (
        Participant.objects
        .filter(group_assignment__group=group)
        .select_related('parent')
        .order_by('last_name', 'first_name')
    )
