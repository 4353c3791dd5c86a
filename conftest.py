from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, UserRole
from apps.groups.models import Group, ParticipantGroup
from apps.participants.models import Participant
from apps.trips.models import (
    Trip,
    TripGroup,
    TripPaymentTemplate,
    TripStatus,
    PaymentType,
    TemplatePaymentMethod,
)


def authenticate(client, user):
    """Attach a JWT access token for ``user`` to the client."""
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def admin_user(db):
    """Create and return a club administrator."""
    return User.objects.create_user(
        email='admin@biegunsport.pl',
        password='TestPass123!',
        first_name='Anna',
        last_name='Trenerska',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def parent_user(db):
    """Create and return a parent."""
    return User.objects.create_user(
        email='parent@example.com',
        password='TestPass123!',
        first_name='Jan',
        last_name='Kowalski',
        phone='600100200',
    )


@pytest.fixture
def other_parent(db):
    """Create and return a second parent."""
    return User.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        first_name='Ewa',
        last_name='Nowak',
        phone='600300400',
    )


@pytest.fixture
def admin_client(admin_user):
    """Return an API client authenticated as admin."""
    return authenticate(APIClient(), admin_user)


@pytest.fixture
def parent_client(parent_user):
    """Return an API client authenticated as parent."""
    return authenticate(APIClient(), parent_user)


@pytest.fixture
def other_parent_client(other_parent):
    """Return an API client authenticated as the second parent."""
    return authenticate(APIClient(), other_parent)


# =============================================================================
# Club data
# =============================================================================

@pytest.fixture
def group(db):
    """Create and return a selectable group."""
    return Group.objects.create(name='Orliki', display_order=1)


@pytest.fixture
def hidden_group(db):
    """Create and return a group parents cannot pick."""
    return Group.objects.create(name='Kadra', display_order=2, is_selectable_by_parent=False)


@pytest.fixture
def participant(parent_user, group):
    """Child of ``parent_user`` assigned to ``group``."""
    child = Participant.objects.create(
        parent=parent_user,
        first_name='Zosia',
        last_name='Kowalska',
        birth_date=date(2015, 3, 14),
    )
    ParticipantGroup.objects.create(participant=child, group=group)
    return child


@pytest.fixture
def other_participant(other_parent, group):
    """Child of ``other_parent`` assigned to ``group``."""
    child = Participant.objects.create(
        parent=other_parent,
        first_name='Kuba',
        last_name='Nowak',
        birth_date=date(2017, 6, 1),
    )
    ParticipantGroup.objects.create(participant=child, group=group)
    return child


@pytest.fixture
def trip(admin_user, group):
    """
    Published trip for ``group`` with two installments and two season passes.

    The first installment is due in ten days, the second in forty.
    """
    departure = timezone.now() + timedelta(days=60)
    trip = Trip.objects.create(
        title='Obóz Zakopane',
        description='Tydzień na nartach',
        location='Zakopane',
        departure_datetime=departure,
        departure_location='Kraków, Galeria Bronowice',
        return_datetime=departure + timedelta(days=6, hours=12),
        return_location='Kraków, Galeria Bronowice',
        status=TripStatus.PUBLISHED,
        created_by=admin_user,
    )
    TripGroup.objects.create(trip=trip, group=group)
    TripPaymentTemplate.objects.create(
        trip=trip,
        payment_type=PaymentType.INSTALLMENT,
        installment_number=1,
        is_first_installment=True,
        amount=Decimal('800.00'),
        due_date=timezone.localdate() + timedelta(days=10),
        payment_method=TemplatePaymentMethod.TRANSFER,
    )
    TripPaymentTemplate.objects.create(
        trip=trip,
        payment_type=PaymentType.INSTALLMENT,
        installment_number=2,
        amount=Decimal('700.00'),
        due_date=timezone.localdate() + timedelta(days=40),
        payment_method=TemplatePaymentMethod.BOTH,
    )
    TripPaymentTemplate.objects.create(
        trip=trip,
        payment_type=PaymentType.SEASON_PASS,
        category_name='2014-2016',
        birth_year_from=2014,
        birth_year_to=2016,
        amount=Decimal('250.00'),
        due_date=timezone.localdate() + timedelta(days=40),
        payment_method=TemplatePaymentMethod.CASH,
    )
    TripPaymentTemplate.objects.create(
        trip=trip,
        payment_type=PaymentType.SEASON_PASS,
        category_name='2017-2019',
        birth_year_from=2017,
        birth_year_to=2019,
        amount=Decimal('180.00'),
        due_date=timezone.localdate() + timedelta(days=40),
        payment_method=TemplatePaymentMethod.CASH,
    )
    return trip


@pytest.fixture
def draft_trip(admin_user, group):
    """Unpublished trip for ``group`` without payment templates."""
    departure = timezone.now() + timedelta(days=90)
    trip = Trip.objects.create(
        title='Wyjazd próbny',
        departure_datetime=departure,
        departure_location='Kraków',
        return_datetime=departure + timedelta(days=2),
        return_location='Kraków',
        status=TripStatus.DRAFT,
        created_by=admin_user,
    )
    TripGroup.objects.create(trip=trip, group=group)
    return trip
