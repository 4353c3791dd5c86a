import pytest

from apps.contracts.models import TripContract


@pytest.fixture
def contract(trip, participant):
    """Contract of ``participant`` for ``trip``, not yet accepted."""
    return TripContract.objects.create(
        trip=trip,
        participant=participant,
        contract_text='Umowa dla Zosia Kowalska',
        contract_number='1/2026',
    )
