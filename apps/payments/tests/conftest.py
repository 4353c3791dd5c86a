import pytest

from apps.trips.models import ParticipationStatus
from apps.trips.services import set_participation_status


@pytest.fixture
def confirmed(trip, participant, parent_user):
    """Registration of ``participant`` confirmed by the parent, with its payments."""
    return set_participation_status(
        trip_id=trip.id,
        participant_id=participant.id,
        user=parent_user,
        participation_status=ParticipationStatus.CONFIRMED,
    )


@pytest.fixture
def payments(confirmed):
    """Payments of the confirmed registration as {label: Payment}."""
    return {payment.label: payment for payment in confirmed.payments.all()}


@pytest.fixture
def first_installment(payments):
    """Installment 1 (800 PLN, due in ten days)."""
    return payments['Rata 1']
