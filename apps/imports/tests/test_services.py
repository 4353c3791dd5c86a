"""
Service layer unit tests for imports app.

Tests cover:
- CSV staging
- Children import (parents, groups, per-row errors)
- Trips import (draft trips with payment templates)
"""

import io
import pytest
from datetime import date, time
from decimal import Decimal
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import Group
from apps.imports.models import ChildImportRow, TripImportRow, ImportStatus
from apps.imports.services import (
    stage_csv,
    get_import_stats,
    run_children_import,
    reset_children_import,
    fix_contact_data,
    run_trips_import,
    reset_trips_import,
    InvalidCSVError,
)
from apps.participants.models import Participant
from apps.trips.models import Trip, TripStatus, PaymentType


# =============================================================================
# Staging
# =============================================================================

@pytest.mark.django_db
class TestStageCsv:

    def test_semicolon_file_with_unknown_column(self):
        data = 'imie_dziecka;nazwisko_dziecka;kolor\nOla;Lis;zielony\n;;\n'.encode('utf-8')

        result = stage_csv(kind='children', upload=io.BytesIO(data))

        assert result == {'created': 1, 'ignored_columns': ['kolor']}
        row = ChildImportRow.objects.get()
        assert row.child_name == 'Ola Lis'
        assert row.status_importu == ImportStatus.PENDING

    def test_cp1250_file(self):
        data = 'tytul_wyjazdu,sekcja\nŁopuszna,Żaki\n'.encode('cp1250')

        stage_csv(kind='trips', upload=io.BytesIO(data))

        assert TripImportRow.objects.get().tytul_wyjazdu == 'Łopuszna'

    def test_empty_file(self):
        with pytest.raises(InvalidCSVError):
            stage_csv(kind='children', upload=io.BytesIO(b'  \n'))

    def test_no_known_columns(self):
        with pytest.raises(InvalidCSVError):
            stage_csv(kind='children', upload=io.BytesIO(b'a,b\n1,2\n'))

    def test_stats(self):
        ChildImportRow.objects.create(imie_dziecka='A')
        ChildImportRow.objects.create(imie_dziecka='B', status_importu=ImportStatus.ERROR)

        assert get_import_stats(kind='children') == {
            'total': 2, 'oczekuje': 1, 'zaimportowano': 0, 'blad': 1,
        }


# =============================================================================
# Children import
# =============================================================================

@pytest.fixture
def child_rows(db):
    return [
        ChildImportRow.objects.create(
            id_dziecka_csv='17',
            imie_dziecka='Ola',
            nazwisko_dziecka='Lis',
            data_urodzenia='05.03.2016',
            mail_1='Nowy@Example.com',
            telefon_1='600 111 222',
            sekcja='orliki',
        ),
        ChildImportRow.objects.create(
            imie_dziecka='Staś',
            nazwisko_dziecka='Kowalski',
            data_urodzenia='1.9.2016',
            mail_1='parent@example.com',
            mail_2='mama@example.com',
            telefon_1='700 000 000',
            sekcja='Pingwiny',
        ),
        ChildImportRow.objects.create(
            imie_dziecka='Jaś',
            nazwisko_dziecka='Nowy',
            data_urodzenia='2016-03-05',
            mail_1='nowy@example.com',
        ),
    ]


@pytest.mark.django_db
class TestChildrenImport:

    def test_run(self, child_rows, group, parent_user, admin_user):
        result = run_children_import(imported_by=admin_user)

        assert result['total'] == 3
        assert result['imported'] == 2
        assert result['errors'] == 1
        assert result['new_parents'] == 1
        assert result['new_groups'] == 1
        assert result['details'][2]['status'] == 'error'
        assert 'Nieprawidłowy format daty' in result['details'][2]['error']

        new_parent = User.objects.get(email='nowy@example.com')
        assert new_parent.phone == '600111222'
        ola = Participant.objects.get(first_name='Ola')
        assert ola.parent == new_parent
        assert ola.group == group
        assert ola.notes == 'Import CSV ID: 17'

        # existing contact data is kept, missing data is filled in
        parent_user.refresh_from_db()
        assert parent_user.phone == '600100200'
        assert parent_user.secondary_email == 'mama@example.com'
        assert Group.objects.filter(name='PINGWINY').exists()

        child_rows[2].refresh_from_db()
        assert child_rows[2].status_importu == ImportStatus.ERROR

    def test_rerun_imports_nothing(self, child_rows):
        run_children_import()

        result = run_children_import()

        assert result['total'] == 0
        assert Participant.objects.count() == 2

    def test_reset_and_fix_row(self, child_rows):
        run_children_import()

        assert reset_children_import() == 1
        ChildImportRow.objects.filter(id=child_rows[2].id).update(data_urodzenia='05.03.2016')
        result = run_children_import()

        assert result['imported'] == 1
        assert result['new_parents'] == 0
        assert Participant.objects.filter(parent__email='nowy@example.com').count() == 2

    def test_fix_contact_data(self, child_rows, parent_user):
        run_children_import()
        User.objects.filter(email='nowy@example.com').delete()

        result = fix_contact_data()

        assert result == {'fixed': 1, 'errors': 1}
        parent_user.refresh_from_db()
        assert parent_user.phone == '700000000'


# =============================================================================
# Trips import
# =============================================================================

@pytest.mark.django_db
class TestTripsImport:

    def test_run(self, group, admin_user):
        TripImportRow.objects.create(
            tytul_wyjazdu='Białka Tatrzańska',
            opis='Weekend na stoku',
            info='Zabrać kask',
            sekcja='Orliki',
            data_wyjazdu='14.02.2027',
            godzina_wyjazdu='6:30',
            miejsce_wyjazdu='BP Pasternik',
            data_powrotu='16.02.2027',
            godzina_powrotu='',
            kwota_1='450 zł',
            termin_1='01.02.2027',
            forma_platnosci_1='przelew',
            karnety_reguly='2014-2016: 250, 2017: 180',
            forma_platnosci_karnet='gotówka',
        )
        TripImportRow.objects.create(data_wyjazdu='14.02.2027', data_powrotu='16.02.2027')

        result = run_trips_import(imported_by=admin_user)

        assert result['success'] is False
        assert result['imported'] == 1
        assert result['errors'] == 1
        assert result['error_details'][0].endswith('(bez tytułu): Brak tytułu wyjazdu')

        trip = Trip.objects.get()
        assert trip.status == TripStatus.DRAFT
        assert trip.description == 'Weekend na stoku\n\nZabrać kask'
        assert trip.return_location == 'Do ustalenia'
        assert timezone.localtime(trip.departure_datetime).time() == time(6, 30)
        assert timezone.localtime(trip.return_datetime).time() == time(8, 0)
        assert list(trip.groups.all()) == [group]

        installment = trip.payment_templates.get(payment_type=PaymentType.INSTALLMENT)
        assert installment.amount == Decimal('450')
        assert installment.due_date == date(2027, 2, 1)
        assert installment.payment_method == 'transfer'
        passes = trip.payment_templates.filter(payment_type=PaymentType.SEASON_PASS).order_by('birth_year_from')
        assert [(p.birth_year_from, p.birth_year_to, p.payment_method) for p in passes] == [
            (2014, 2016, 'cash'),
            (2017, 2017, 'cash'),
        ]

    def test_nothing_pending(self):
        result = run_trips_import()

        assert result == {
            'success': True,
            'imported': 0,
            'errors': 0,
            'error_details': ['Brak rekordów do zaimportowania'],
        }

    def test_reset_selected_rows(self):
        first = TripImportRow.objects.create(tytul_wyjazdu='A', status_importu=ImportStatus.IMPORTED)
        TripImportRow.objects.create(tytul_wyjazdu='B', status_importu=ImportStatus.ERROR)

        assert reset_trips_import(row_ids=[first.id]) == 1
        assert reset_trips_import() == 2
