"""
Service layer unit tests for contracts app.

Tests cover:
- Token filling and payment schedule
- Contract numbering
- Acceptance rules
"""

import pytest
from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from django.utils import timezone

from apps.contracts.models import TripContract
from apps.contracts.rendering import (
    fill_contract,
    build_payment_schedule,
    render_contract,
    EMPTY_SCHEDULE,
    NO_TEMPLATES_SCHEDULE,
)
from apps.contracts.services import (
    next_contract_number,
    create_contract_if_needed,
    accept_contract,
    preview_contract,
    save_contract_template,
    activate_contract_template,
    ContractAccessError,
    ContractAlreadyAcceptedError,
    ContractTemplateNotFoundError,
    EmptyContractTemplateError,
)
from apps.trips.models import TripRegistration


# =============================================================================
# Rendering
# =============================================================================

class TestFillContract:

    def test_unknown_tokens_are_kept(self):
        text = fill_contract('{{child_name}} / {{shoe_size}}', {'child_name': 'Zosia Kowalska'})

        assert text == 'Zosia Kowalska / {{shoe_size}}'

    def test_empty_optional_values_become_dash(self):
        text = fill_contract('PESEL: {{parent_pesel}}, e-mail: {{parent_email}}', {'parent_pesel': ''})

        assert text == 'PESEL: —, e-mail: '

    def test_every_occurrence_replaced(self):
        text = fill_contract(
            '{{child_name}} i {{child_name}}, opiekun {{parent_name}} ({{child_name}})',
            {'child_name': 'Zosia Kowalska', 'parent_name': 'Jan Kowalski'},
        )

        assert text == 'Zosia Kowalska i Zosia Kowalska, opiekun Jan Kowalski (Zosia Kowalska)'
        assert '{{' not in text

    @pytest.mark.parametrize('text', [
        '',
        'Umowa uczestnictwa w wyjeździe.',
        'Klamry {pojedyncze} i {{ ze spacją }} zostają.',
        'Kwota: 1200 PLN\n  termin: 15 listopada 2026',
    ])
    def test_text_without_tokens_unchanged(self, text):
        assert fill_contract(text, {'child_name': 'Zosia Kowalska'}) == text

    def test_empty_schedule_sentence(self):
        assert fill_contract('{{payment_schedule}}', {}) == EMPTY_SCHEDULE

    def test_today_date_defaults_to_today(self):
        text = fill_contract('{{today_date}}', {'today_date': '1 stycznia 2027'})

        assert text == '1 stycznia 2027'
        assert fill_contract('{{today_date}}', {}) != ''

    def test_schedule_lines(self):
        templates = [
            SimpleNamespace(
                payment_type='installment', installment_number=1, category_name='',
                amount=Decimal('1200.00'), currency='PLN', due_date=date(2026, 11, 15),
            ),
            SimpleNamespace(
                payment_type='season_pass', installment_number=None, category_name='2014-2016',
                amount=Decimal('250.00'), currency='PLN', due_date=None,
            ),
        ]

        lines = build_payment_schedule(templates).split('\n')

        assert lines[0].startswith('  Rata 1')
        assert lines[0].endswith('1200 PLN   termin: 15 listopada 2026')
        assert 'Karnet (2014-2016)' in lines[1]
        assert lines[1].endswith('termin: termin do uzgodnienia')

    def test_no_templates(self):
        assert build_payment_schedule([]) == NO_TEMPLATES_SCHEDULE


@pytest.mark.django_db
class TestRenderContract:

    def test_child_and_parent_values(self, trip, participant):
        text = render_contract(
            '{{child_name}}, ur. {{child_birth_date}}; {{parent_name}} {{parent_phone}}; {{parent_address}}',
            trip=trip,
            participant=participant,
        )

        assert text == 'Zosia Kowalska, ur. 14 marca 2015; Jan Kowalski 600100200; —'

    def test_schedule_ordered_by_due_date(self, trip, participant):
        text = render_contract('{{payment_schedule}}', trip=trip, participant=participant)

        assert text.index('Rata 1') < text.index('Rata 2')

    def test_rendering_twice_changes_nothing(self, trip, participant):
        template = '{{child_name}} / {{trip_title}} / {{parent_address}}\n{{payment_schedule}}'
        rendered = render_contract(template, trip=trip, participant=participant)

        assert render_contract(rendered, trip=trip, participant=participant) == rendered

    def test_preview_without_registration_uses_placeholders(self, trip):
        text = preview_contract(trip_id=trip.id, template_text='{{child_name}} na {{trip_title}}')

        assert text == '[IMIĘ I NAZWISKO UCZESTNIKA] na Obóz Zakopane'

    def test_preview_with_registration_uses_first_child(self, trip, participant):
        TripRegistration.objects.create(trip=trip, participant=participant)

        text = preview_contract(trip_id=trip.id, template_text='{{child_name}}')

        assert text == 'Zosia Kowalska'


# =============================================================================
# Templates / Contracts
# =============================================================================

@pytest.mark.django_db
class TestContractLifecycle:

    def test_numbering_counts_this_year(self, trip, participant, other_participant):
        TripContract.objects.create(
            trip=trip, participant=other_participant, contract_text='x', contract_number='7/2025',
        )
        TripContract.objects.create(
            trip=trip, participant=participant, contract_text='x', contract_number='1/2026',
        )

        assert next_contract_number(today=date(2026, 10, 19)) == '2/2026'
        assert next_contract_number(today=date(2027, 1, 2)) == '1/2027'

    def test_blank_template_rejected(self, trip, admin_user):
        with pytest.raises(EmptyContractTemplateError):
            save_contract_template(trip_id=trip.id, template_text='   ', user=admin_user)

    def test_activate_requires_saved_template(self, trip, admin_user):
        with pytest.raises(ContractTemplateNotFoundError):
            activate_contract_template(trip_id=trip.id, user=admin_user)

    def test_inactive_template_creates_nothing(self, trip, participant, admin_user):
        save_contract_template(trip_id=trip.id, template_text='{{child_name}}', user=admin_user)
        registration = TripRegistration.objects.create(trip=trip, participant=participant)

        assert create_contract_if_needed(registration=registration) is None

    def test_contract_created_once_and_frozen(self, trip, participant, admin_user):
        save_contract_template(trip_id=trip.id, template_text='Umowa: {{child_name}}', user=admin_user)
        activate_contract_template(trip_id=trip.id, user=admin_user)
        registration = TripRegistration.objects.create(trip=trip, participant=participant)

        contract = create_contract_if_needed(registration=registration, created_by=admin_user)
        save_contract_template(trip_id=trip.id, template_text='Nowa treść', user=admin_user)

        assert create_contract_if_needed(registration=registration) is None
        contract.refresh_from_db()
        assert contract.contract_text == 'Umowa: Zosia Kowalska'
        assert contract.contract_number == f'1/{timezone.localdate().year}'


@pytest.mark.django_db
class TestAcceptContract:

    def test_accept_snapshots_name(self, contract, parent_user):
        accepted = accept_contract(contract_id=contract.id, user=parent_user)

        parent_user.first_name = 'Janusz'
        parent_user.save()

        accepted.refresh_from_db()
        assert accepted.accepted_at is not None
        assert accepted.accepted_name == 'Jan Kowalski'
        assert accepted.accepted_by_parent == parent_user

    def test_other_parent_cannot_accept(self, contract, other_parent):
        with pytest.raises(ContractAccessError):
            accept_contract(contract_id=contract.id, user=other_parent)

    def test_accept_twice(self, contract, parent_user):
        accept_contract(contract_id=contract.id, user=parent_user)

        with pytest.raises(ContractAlreadyAcceptedError):
            accept_contract(contract_id=contract.id, user=parent_user)
