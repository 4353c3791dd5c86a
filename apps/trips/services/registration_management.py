"""
Trip registration service.

Registers children on trips and tracks whether they actually go.
Payments and contracts follow the participation status.
"""

import logging
from typing import Any, Dict, List
from uuid import UUID

from django.db import transaction
from django.db.models import Prefetch, Q

from apps.accounts.models import User
from apps.contracts.services import create_contract_if_needed
from apps.participants.models import Participant
from apps.payments.models import Payment
from apps.payments.services import (
    create_payments_for_registration,
    cancel_pending_payments,
    cancel_registration_payments,
    has_open_payments,
)
from apps.trips.models import (
    Trip,
    TripRegistration,
    RegistrationStatus,
    RegistrationType,
    ParticipationStatus,
)

from .exceptions import (
    TripNotFoundError,
    RegistrationNotFoundError,
    ParticipantAccessError,
    AlreadyRegisteredError,
    OutsideGroupError,
    TripNotOpenError,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIRMED_NOTE = '[STOP1]'


def _get_trip(trip_id: UUID, *, lock: bool = False) -> Trip:
    qs = Trip.objects.select_for_update() if lock else Trip.objects.all()
    try:
        return qs.get(id=trip_id)
    except Trip.DoesNotExist:
        raise TripNotFoundError(f"Trip with ID {trip_id} not found")


def _get_participant(participant_id: UUID, user: User) -> Participant:
    try:
        participant = (
            Participant.objects
            .select_related('parent', 'group_assignment__group')
            .get(id=participant_id)
        )
    except Participant.DoesNotExist:
        raise ParticipantAccessError(f"Participant with ID {participant_id} not found")

    if not user.is_admin and not participant.is_owned_by(user):
        raise ParticipantAccessError("You can only manage your own children")
    return participant


def _check_parent_can_join(trip: Trip, participant: Participant, user: User) -> bool:
    """
    Return whether the child is outside the trip's groups.

    Raises for parents acting on unpublished trips or outside-group children.
    """
    is_outside_group = not trip.has_group(participant.group)
    if not user.is_admin:
        if not trip.is_published:
            raise TripNotOpenError("Registration for this trip is not open")
        if is_outside_group:
            raise OutsideGroupError("The child's group is not invited to this trip")
    return is_outside_group


@transaction.atomic
def register_participant(*, trip_id: UUID, participant_id: UUID, user: User) -> TripRegistration:
    """
    Register a child on a trip and create the payments it owes.

    Parents may only register their own children from the trip's groups.
    Admins may register anyone, outsiders are flagged.
    A cancelled registration is reactivated.

    Args:
        trip_id: Trip to register on
        participant_id: Child to register
        user: Parent or admin performing the registration

    Returns:
        The active TripRegistration

    Raises:
        TripNotFoundError: If trip doesn't exist
        ParticipantAccessError: If the child is missing or not the parent's
        TripNotOpenError: If a parent registers on an unpublished trip
        OutsideGroupError: If a parent registers a child outside the trip's groups
        AlreadyRegisteredError: If the child is already actively registered
    """
    from apps.notifications.emails import send_registration_confirmation_email

    trip = _get_trip(trip_id, lock=True)
    participant = _get_participant(participant_id, user)
    is_outside_group = _check_parent_can_join(trip, participant, user)
    registration_type = RegistrationType.ADMIN if user.is_admin else RegistrationType.PARENT

    registration = (
        TripRegistration.objects
        .select_for_update()
        .filter(trip=trip, participant=participant)
        .first()
    )
    if registration is not None and registration.is_active:
        raise AlreadyRegisteredError("This child is already registered for the trip")

    if registration is None:
        registration = TripRegistration.objects.create(
            trip=trip,
            participant=participant,
            registered_by=user,
            registration_type=registration_type,
            is_outside_group=is_outside_group,
        )
    else:
        registration.status = RegistrationStatus.ACTIVE
        registration.registered_by = user
        registration.registration_type = registration_type
        registration.is_outside_group = is_outside_group
        registration.save()

    if not has_open_payments(registration=registration):
        create_payments_for_registration(registration=registration)

    logger.info("Registered participant %s on trip %s", participant.id, trip.id)
    transaction.on_commit(lambda: send_registration_confirmation_email(registration))
    return registration


@transaction.atomic
def cancel_registration(*, registration_id: UUID) -> TripRegistration:
    """
    Cancel a registration and every payment it owes (admin).

    Raises:
        RegistrationNotFoundError: If registration doesn't exist
    """
    try:
        registration = TripRegistration.objects.select_for_update().get(id=registration_id)
    except TripRegistration.DoesNotExist:
        raise RegistrationNotFoundError(f"Registration with ID {registration_id} not found")

    registration.status = RegistrationStatus.CANCELLED
    registration.save(update_fields=['status', 'updated_at'])
    cancelled = cancel_registration_payments(registration=registration)

    logger.info("Cancelled registration %s and %s payment(s)", registration.id, cancelled)
    return registration


@transaction.atomic
def set_participation_status(
    *,
    trip_id: UUID,
    participant_id: UUID,
    user: User,
    participation_status: str,
    note: str = '',
) -> TripRegistration:
    """
    Record whether a child goes on a trip.

    The registration is created when missing. Confirming bills the
    registration (if it has no open payments) and materializes the
    contract; ``not_going`` and ``unconfirmed`` cancel pending payments;
    ``other`` only stores the note for the admin.

    Args:
        trip_id: Trip
        participant_id: Child
        user: Parent (own child, trip in child's group) or admin
        participation_status: One of ParticipationStatus
        note: Free text; admins confirming without a note get the first stop marker

    Returns:
        The updated TripRegistration
    """
    trip = _get_trip(trip_id, lock=True)
    participant = _get_participant(participant_id, user)
    is_outside_group = _check_parent_can_join(trip, participant, user)

    note = (note or '').strip()
    if user.is_admin and participation_status == ParticipationStatus.CONFIRMED and not note:
        note = DEFAULT_CONFIRMED_NOTE

    registration = (
        TripRegistration.objects
        .select_for_update()
        .filter(trip=trip, participant=participant)
        .first()
    )
    if registration is None:
        registration = TripRegistration(
            trip=trip,
            participant=participant,
            registered_by=user,
            registration_type=RegistrationType.ADMIN if user.is_admin else RegistrationType.PARENT,
            is_outside_group=is_outside_group,
        )

    registration.participation_status = participation_status
    registration.participation_note = note
    registration.status = RegistrationStatus.ACTIVE
    registration.save()

    if participation_status == ParticipationStatus.CONFIRMED:
        if not has_open_payments(registration=registration):
            create_payments_for_registration(registration=registration)
        create_contract_if_needed(registration=registration, created_by=user)
    elif participation_status in (ParticipationStatus.NOT_GOING, ParticipationStatus.UNCONFIRMED):
        cancel_pending_payments(registration=registration)

    logger.info(
        "Participation of %s on trip %s set to %s",
        participant.id, trip.id, participation_status,
    )
    return registration


def get_trip_participants(*, trip_id: UUID) -> List[Dict[str, Any]]:
    """
    Children of the trip's groups plus any registered outsiders.

    Returns:
        List of {'participant': Participant, 'registration': TripRegistration or None},
        sorted by last name
    """
    trip = _get_trip(trip_id)
    group_ids = list(trip.trip_groups.values_list('group_id', flat=True))

    participants = (
        Participant.objects
        .filter(
            Q(group_assignment__group_id__in=group_ids)
            | Q(registrations__trip=trip)
        )
        .distinct()
        .select_related('parent', 'group_assignment__group')
        .order_by('last_name', 'first_name')
    )

    registrations = {
        registration.participant_id: registration
        for registration in (
            TripRegistration.objects
            .filter(trip=trip)
            .prefetch_related(
                Prefetch('payments', queryset=Payment.objects.order_by('due_date'))
            )
        )
    }

    return [
        {'participant': participant, 'registration': registrations.get(participant.id)}
        for participant in participants
    ]
