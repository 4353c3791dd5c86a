"""
Trip management service.

Handles trip CRUD, duplication and the parent-facing trip listing.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Prefetch, QuerySet

from apps.accounts.models import User
from apps.groups.models import Group
from apps.participants.models import Participant
from apps.trips.models import (
    Trip,
    TripGroup,
    TripPaymentTemplate,
    TripRegistration,
    TripStatus,
    ParticipationStatus,
)

from .exceptions import TripNotFoundError

logger = logging.getLogger(__name__)

COPY_TITLE_SUFFIX = ' (kopia)'

TEMPLATE_FIELDS = (
    'payment_type',
    'installment_number',
    'is_first_installment',
    'includes_season_pass',
    'category_name',
    'birth_year_from',
    'birth_year_to',
    'amount',
    'currency',
    'due_date',
    'payment_method',
)


def _set_groups(trip: Trip, groups: Iterable[Group]) -> None:
    trip.trip_groups.all().delete()
    TripGroup.objects.bulk_create([TripGroup(trip=trip, group=group) for group in groups])


def _set_payment_templates(trip: Trip, templates: Iterable[Dict[str, Any]]) -> None:
    trip.payment_templates.all().delete()
    TripPaymentTemplate.objects.bulk_create([
        TripPaymentTemplate(
            trip=trip,
            **{key: value for key, value in template.items() if key in TEMPLATE_FIELDS}
        )
        for template in templates
    ])


def _next_year(value):
    """Same calendar moment one year later (29 February becomes 28 February)."""
    if value is None:
        return None
    try:
        return value.replace(year=value.year + 1)
    except ValueError:
        return value.replace(year=value.year + 1, day=28)


def get_trip_by_id(*, trip_id: UUID, user: Optional[User] = None) -> Trip:
    """
    Get a trip. Parents only see published trips.

    Raises:
        TripNotFoundError: If the trip doesn't exist or is hidden from the user
    """
    qs = Trip.objects.prefetch_related('trip_groups__group', 'payment_templates')
    if user is not None and not user.is_admin:
        qs = qs.filter(status=TripStatus.PUBLISHED)
    try:
        return qs.get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")


def list_trips_for_user(*, user: User, status: Optional[str] = None) -> QuerySet:
    """All trips for admins, published ones for parents."""
    qs = Trip.objects.prefetch_related('trip_groups__group', 'payment_templates')
    if not user.is_admin:
        qs = qs.filter(status=TripStatus.PUBLISHED)
    elif status:
        qs = qs.filter(status=status)
    return qs.order_by('-departure_datetime')


@transaction.atomic
def create_trip(
    *,
    created_by: User,
    groups: List[Group],
    payment_templates: List[Dict[str, Any]],
    **fields,
) -> Trip:
    """
    Create a trip with its groups and payment templates.

    Args:
        created_by: Admin creating the trip
        groups: Groups the trip is offered to
        payment_templates: Template dicts (see TripPaymentTemplate fields)
        **fields: Trip model fields

    Returns:
        Created Trip instance
    """
    trip = Trip.objects.create(created_by=created_by, **fields)
    _set_groups(trip, groups)
    _set_payment_templates(trip, payment_templates)
    logger.info("Created trip %s (%s)", trip.title, trip.id)
    return trip


@transaction.atomic
def update_trip(
    *,
    trip_id: UUID,
    groups: Optional[List[Group]] = None,
    payment_templates: Optional[List[Dict[str, Any]]] = None,
    **fields,
) -> Trip:
    """
    Update a trip. Given groups and templates replace the existing ones.

    Existing payments keep their amounts; templates only affect future registrations.

    Raises:
        TripNotFoundError: If trip doesn't exist
    """
    try:
        trip = Trip.objects.select_for_update().get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")

    for name, value in fields.items():
        setattr(trip, name, value)
    trip.save()

    if groups is not None:
        _set_groups(trip, groups)
    if payment_templates is not None:
        _set_payment_templates(trip, payment_templates)

    return trip


@transaction.atomic
def set_trip_status(*, trip_id: UUID, status: str) -> Trip:
    try:
        trip = Trip.objects.select_for_update().get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")

    trip.status = status
    trip.save(update_fields=['status', 'updated_at'])
    logger.info("Trip %s status set to %s", trip.id, status)
    return trip


@transaction.atomic
def delete_trip(*, trip_id: UUID) -> None:
    """Delete a trip with registrations, payments, templates and contracts."""
    try:
        trip = Trip.objects.select_for_update().get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")

    logger.info("Deleting trip %s (%s)", trip.title, trip.id)
    trip.delete()


@transaction.atomic
def duplicate_trip(*, trip_id: UUID, created_by: User) -> Trip:
    """
    Copy a trip one year ahead as a draft.

    All datetimes and template due dates move one year later and season-pass
    birth years move up by one. Registrations are not copied.
    """
    source = get_trip_by_id(trip_id=trip_id)

    copy = Trip.objects.create(
        title=f"{source.title}{COPY_TITLE_SUFFIX}",
        description=source.description,
        location=source.location,
        declaration_deadline=_next_year(source.declaration_deadline),
        departure_datetime=_next_year(source.departure_datetime),
        departure_location=source.departure_location,
        departure_stop2_datetime=_next_year(source.departure_stop2_datetime),
        departure_stop2_location=source.departure_stop2_location,
        return_datetime=_next_year(source.return_datetime),
        return_location=source.return_location,
        return_stop2_datetime=_next_year(source.return_stop2_datetime),
        return_stop2_location=source.return_stop2_location,
        bank_account_pln=source.bank_account_pln,
        bank_account_eur=source.bank_account_eur,
        status=TripStatus.DRAFT,
        created_by=created_by,
    )
    _set_groups(copy, [trip_group.group for trip_group in source.trip_groups.all()])

    templates = []
    for template in source.payment_templates.all():
        data = {name: getattr(template, name) for name in TEMPLATE_FIELDS}
        data['due_date'] = _next_year(template.due_date)
        if template.birth_year_from is not None:
            data['birth_year_from'] = template.birth_year_from + 1
        if template.birth_year_to is not None:
            data['birth_year_to'] = template.birth_year_to + 1
        templates.append(data)
    _set_payment_templates(copy, templates)

    logger.info("Duplicated trip %s into %s", source.id, copy.id)
    return copy


def get_trips_for_parent(*, parent: User, participant_id: Optional[UUID] = None) -> List[Dict[str, Any]]:
    """
    Published trips offered to the groups of a parent's children.

    Each entry has the trip and, for every eligible child, the current
    participation status (``unconfirmed`` when not registered yet).

    Args:
        parent: The parent
        participant_id: Optional child to narrow the listing to

    Returns:
        List of {'trip': Trip, 'children': [ {...}, ... ]}
    """
    children = list(
        Participant.objects
        .filter(parent=parent)
        .select_related('group_assignment__group')
        .order_by('first_name')
    )
    if participant_id:
        children = [child for child in children if str(child.id) == str(participant_id)]

    group_ids = {child.group.id for child in children if child.group}
    if not group_ids:
        return []

    trips = list(
        Trip.objects
        .filter(status=TripStatus.PUBLISHED, trip_groups__group_id__in=group_ids)
        .distinct()
        .prefetch_related(
            'trip_groups',
            Prefetch('payment_templates', queryset=TripPaymentTemplate.objects.all()),
        )
        .order_by('departure_datetime')
    )

    registrations = {
        (registration.trip_id, registration.participant_id): registration
        for registration in TripRegistration.objects.filter(
            trip__in=trips,
            participant__in=children,
        )
    }

    result = []
    for trip in trips:
        trip_group_ids = {trip_group.group_id for trip_group in trip.trip_groups.all()}
        entries = []
        for child in children:
            if not child.group or child.group.id not in trip_group_ids:
                continue
            registration = registrations.get((trip.id, child.id))
            entries.append({
                'participant_id': child.id,
                'participant_name': child.full_name,
                'registration_id': registration.id if registration else None,
                'participation_status': (
                    registration.participation_status
                    if registration else ParticipationStatus.UNCONFIRMED
                ),
                'participation_note': registration.participation_note if registration else '',
            })
        result.append({'trip': trip, 'children': entries})
    return result

