"""
Contract service.

Admins keep one contract template per trip. When a child's participation
is confirmed on a trip with an active template, a contract is rendered
and frozen for that child; the parent accepts it electronically.
"""

import logging
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.contracts.default_template import DEFAULT_CONTRACT_TEMPLATE
from apps.contracts.models import TripContract, TripContractTemplate
from apps.contracts.rendering import render_contract, render_preview
from apps.trips.models import Trip, TripRegistration, RegistrationStatus

from .exceptions import (
    ContractNotFoundError,
    ContractTemplateNotFoundError,
    ContractAccessError,
    ContractAlreadyAcceptedError,
    EmptyContractTemplateError,
    ContractTripNotFoundError,
)

logger = logging.getLogger(__name__)


def _get_trip(trip_id: UUID) -> Trip:
    try:
        return Trip.objects.prefetch_related('payment_templates').get(id=trip_id)
    except Trip.DoesNotExist:
        raise ContractTripNotFoundError(f"Trip with ID {trip_id} not found")


def _contract_queryset() -> QuerySet:
    return TripContract.objects.select_related(
        'trip',
        'participant__parent',
        'accepted_by_parent',
    )


# =============================================================================
# TEMPLATES
# =============================================================================

def get_contract_template(*, trip_id: UUID) -> dict:
    """
    Stored template of a trip, or the default wording when none exists.

    Returns:
        Dict with template_text, is_active, activated_at and is_default
    """
    trip = _get_trip(trip_id)
    template = TripContractTemplate.objects.filter(trip=trip).first()
    if template is None:
        return {
            'trip_id': trip.id,
            'template_text': DEFAULT_CONTRACT_TEMPLATE,
            'is_active': False,
            'activated_at': None,
            'is_default': True,
        }
    return {
        'trip_id': trip.id,
        'template_text': template.template_text,
        'is_active': template.is_active,
        'activated_at': template.activated_at,
        'is_default': False,
    }


@transaction.atomic
def save_contract_template(*, trip_id: UUID, template_text: str, user: User) -> TripContractTemplate:
    """
    Create or replace the template text of a trip.

    A new template starts inactive; saving an existing one keeps its state.

    Raises:
        ContractTripNotFoundError: If the trip does not exist
        EmptyContractTemplateError: If the text is blank
    """
    if not template_text or not template_text.strip():
        raise EmptyContractTemplateError("Contract template cannot be empty")

    trip = _get_trip(trip_id)
    template, created = TripContractTemplate.objects.select_for_update().get_or_create(
        trip=trip,
        defaults={'template_text': template_text, 'created_by': user},
    )
    if not created:
        template.template_text = template_text
        template.save(update_fields=['template_text', 'updated_at'])

    logger.info("Saved contract template for trip %s (created=%s)", trip.id, created)
    return template


@transaction.atomic
def activate_contract_template(*, trip_id: UUID, user: User) -> TripContractTemplate:
    """
    Start producing contracts for the trip.

    Raises:
        ContractTemplateNotFoundError: If no template was saved yet
    """
    template = TripContractTemplate.objects.select_for_update().filter(trip_id=trip_id).first()
    if template is None:
        raise ContractTemplateNotFoundError("Save the contract template before activating it")

    template.is_active = True
    template.activated_at = timezone.now()
    template.activated_by = user
    template.save(update_fields=['is_active', 'activated_at', 'activated_by', 'updated_at'])

    logger.info("Contract template for trip %s activated by %s", trip_id, user.email)
    return template


@transaction.atomic
def deactivate_contract_template(*, trip_id: UUID) -> TripContractTemplate:
    """
    Stop producing contracts. Existing contracts are kept.

    Raises:
        ContractTemplateNotFoundError: If no template was saved yet
    """
    template = TripContractTemplate.objects.select_for_update().filter(trip_id=trip_id).first()
    if template is None:
        raise ContractTemplateNotFoundError("No contract template for this trip")

    template.is_active = False
    template.save(update_fields=['is_active', 'updated_at'])
    logger.info("Contract template for trip %s deactivated", trip_id)
    return template


def preview_contract(*, trip_id: UUID, template_text: Optional[str] = None) -> str:
    """
    Render the trip's template for the admin.

    Uses the first active registration of the trip; without one the child
    and parent fields show bracketed placeholders.
    """
    trip = _get_trip(trip_id)
    if template_text is None:
        template_text = get_contract_template(trip_id=trip_id)['template_text']

    registration = (
        TripRegistration.objects
        .select_related('participant__parent')
        .filter(trip=trip, status=RegistrationStatus.ACTIVE)
        .order_by('created_at')
        .first()
    )
    if registration is None:
        return render_preview(template_text, trip=trip)
    return render_contract(template_text, trip=trip, participant=registration.participant)


# =============================================================================
# CONTRACTS
# =============================================================================

def next_contract_number(today=None) -> str:
    """``N/YYYY`` where N counts this year's numbered contracts."""
    year = (today or timezone.localdate()).year
    count = TripContract.objects.filter(contract_number__endswith=f'/{year}').count()
    return f"{count + 1}/{year}"


@transaction.atomic
def create_contract_if_needed(
    *,
    registration: TripRegistration,
    created_by: Optional[User] = None,
) -> Optional[TripContract]:
    """
    Materialize the contract of a confirmed registration.

    Does nothing when the trip has no active template or the child already
    has a contract for the trip; an existing contract is never re-rendered.

    Returns:
        The new TripContract, or None when nothing was created
    """
    template = (
        TripContractTemplate.objects
        .select_for_update()
        .filter(trip_id=registration.trip_id, is_active=True)
        .first()
    )
    if template is None:
        return None

    if TripContract.objects.filter(
        trip_id=registration.trip_id,
        participant_id=registration.participant_id,
    ).exists():
        return None

    trip = _get_trip(registration.trip_id)
    participant = registration.participant
    contract = TripContract.objects.create(
        trip=trip,
        participant=participant,
        registration=registration,
        contract_text=render_contract(template.template_text, trip=trip, participant=participant),
        contract_number=next_contract_number(),
        created_by=created_by,
    )
    logger.info(
        "Created contract %s for %s on trip %s",
        contract.contract_number, participant.id, trip.id,
    )
    return contract


def get_contract_for_user(*, contract_id: UUID, user: User) -> TripContract:
    """
    Get a contract visible to the user (admin or the child's parent).

    Raises:
        ContractNotFoundError: If missing or not the user's
    """
    try:
        contract = _contract_queryset().get(id=contract_id)
    except TripContract.DoesNotExist:
        raise ContractNotFoundError(f"Contract with ID {contract_id} not found")

    if not user.is_admin and contract.participant.parent_id != user.id:
        raise ContractNotFoundError(f"Contract with ID {contract_id} not found")
    return contract


@transaction.atomic
def accept_contract(*, contract_id: UUID, user: User) -> TripContract:
    """
    Electronic signature by the child's parent.

    Stores the acceptance time and a snapshot of the parent's name.

    Raises:
        ContractNotFoundError: If the contract does not exist
        ContractAccessError: If the user is not the child's parent
        ContractAlreadyAcceptedError: If the contract was accepted before
    """
    try:
        contract = (
            TripContract.objects
            .select_for_update(of=('self',))
            .select_related('participant')
            .get(id=contract_id)
        )
    except TripContract.DoesNotExist:
        raise ContractNotFoundError(f"Contract with ID {contract_id} not found")

    if contract.participant.parent_id != user.id:
        raise ContractAccessError("You can only accept contracts of your own children")
    if contract.accepted_at is not None:
        raise ContractAlreadyAcceptedError("Contract has already been accepted")

    contract.accepted_at = timezone.now()
    contract.accepted_by_parent = user
    contract.accepted_name = user.get_full_name()
    contract.save(update_fields=['accepted_at', 'accepted_by_parent', 'accepted_name'])

    logger.info("Contract %s accepted by %s", contract.contract_number, user.email)
    return contract


def list_contracts(*, trip_id: Optional[UUID] = None, accepted: Optional[bool] = None) -> QuerySet:
    """All contracts (admin), optionally narrowed to a trip or acceptance state."""
    qs = _contract_queryset()
    if trip_id:
        qs = qs.filter(trip_id=trip_id)
    if accepted is not None:
        qs = qs.filter(accepted_at__isnull=not accepted)
    return qs.order_by('-created_at')


def list_parent_contracts(*, parent: User) -> QuerySet:
    """Contracts of the parent's children, newest first."""
    return _contract_queryset().filter(participant__parent=parent).order_by('-created_at')


@transaction.atomic
def delete_contracts(*, contract_ids: List[UUID]) -> int:
    """
    Delete contracts in bulk (admin).

    Returns:
        Number of deleted contracts
    """
    if not contract_ids:
        return 0
    deleted, _ = TripContract.objects.filter(id__in=contract_ids).delete()
    logger.info("Deleted %s contract(s)", deleted)
    return deleted
