"""
Contract text rendering.

Fills ``{{token}}`` placeholders of a contract template with trip, child
and parent data. Unknown tokens are left as they are.
"""

import re
from typing import Dict, Iterable, Optional

from django.utils import timezone

from apps.trips.formatting import polish_date, polish_datetime, format_amount
from apps.trips.models import PaymentType

EMPTY_VALUE = '—'
EMPTY_SCHEDULE = '  Brak harmonogramu płatności.'
NO_TEMPLATES_SCHEDULE = '  Szczegółowy harmonogram płatności zostanie przekazany przez Organizatora.'

CONTRACT_TOKENS = (
    'trip_title',
    'trip_location',
    'trip_departure',
    'trip_return',
    'trip_bank_pln',
    'trip_bank_eur',
    'child_name',
    'child_birth_date',
    'parent_name',
    'parent_email',
    'parent_address',
    'parent_pesel',
    'parent_phone',
    'payment_schedule',
    'today_date',
)

# Shown when an empty value would leave a hole in the contract
OPTIONAL_TOKENS = {
    'trip_location',
    'trip_bank_pln',
    'trip_bank_eur',
    'parent_address',
    'parent_pesel',
    'parent_phone',
}

PREVIEW_PLACEHOLDERS = {
    'child_name': '[IMIĘ I NAZWISKO UCZESTNIKA]',
    'child_birth_date': '[DATA URODZENIA]',
    'parent_name': '[IMIĘ I NAZWISKO OPIEKUNA]',
    'parent_email': '[E-MAIL OPIEKUNA]',
    'parent_address': '[ADRES OPIEKUNA]',
    'parent_pesel': '[PESEL OPIEKUNA]',
    'parent_phone': '[TELEFON OPIEKUNA]',
}

_TOKEN_RE = re.compile(r'\{\{(\w+)\}\}')


def _schedule_label(template) -> str:
    if template.payment_type == PaymentType.SEASON_PASS:
        return f"Karnet ({template.category_name})" if template.category_name else 'Karnet'
    if template.installment_number:
        return f"Rata {template.installment_number}"
    return 'Pełna opłata'


def build_payment_schedule(templates: Iterable) -> str:
    """
    One line per payment template, e.g.
    ``  Rata 1                          1200 PLN   termin: 15 listopada 2026``.
    """
    templates = list(templates)
    if not templates:
        return NO_TEMPLATES_SCHEDULE

    lines = []
    for template in templates:
        due = polish_date(template.due_date) if template.due_date else 'termin do uzgodnienia'
        lines.append(
            f"  {_schedule_label(template).ljust(28)} "
            f"{format_amount(template.amount).rjust(6)} {template.currency}   termin: {due}"
        )
    return '\n'.join(lines)


def _ordered_templates(trip):
    # Dated templates first, undated ones last
    return sorted(
        trip.payment_templates.all(),
        key=lambda t: (t.due_date is None, t.due_date or timezone.localdate()),
    )


def trip_values(trip) -> Dict[str, str]:
    """Trip tokens, including the rendered payment schedule."""
    return {
        'trip_title': trip.title,
        'trip_location': trip.location,
        'trip_departure': f"{polish_datetime(trip.departure_datetime)} — {trip.departure_location}",
        'trip_return': f"{polish_datetime(trip.return_datetime)} — {trip.return_location}",
        'trip_bank_pln': trip.bank_account_pln,
        'trip_bank_eur': trip.bank_account_eur,
        'payment_schedule': build_payment_schedule(_ordered_templates(trip)),
    }


def participant_values(participant) -> Dict[str, str]:
    """Child and parent tokens."""
    parent = participant.parent
    return {
        'child_name': participant.full_name,
        'child_birth_date': polish_date(participant.birth_date),
        'parent_name': parent.get_full_name(),
        'parent_email': parent.email,
        'parent_address': parent.get_address(),
        'parent_pesel': parent.pesel,
        'parent_phone': parent.phone,
    }


def fill_contract(template_text: str, values: Dict[str, Optional[str]]) -> str:
    """
    Replace every known ``{{token}}`` in ``template_text``.

    Empty optional values become an em dash and an empty schedule gets a
    stock sentence. ``today_date`` defaults to today's Polish date.
    """
    values = dict(values)
    if not values.get('today_date'):
        values['today_date'] = polish_date(timezone.localdate())

    def replace(match):
        token = match.group(1)
        if token not in CONTRACT_TOKENS:
            return match.group(0)
        value = values.get(token) or ''
        if not value:
            if token == 'payment_schedule':
                return EMPTY_SCHEDULE
            if token in OPTIONAL_TOKENS:
                return EMPTY_VALUE
        return str(value)

    return _TOKEN_RE.sub(replace, template_text)


def render_contract(template_text: str, *, trip, participant) -> str:
    """Contract text for one child on one trip."""
    return fill_contract(template_text, {**trip_values(trip), **participant_values(participant)})


def render_preview(template_text: str, *, trip) -> str:
    """Contract text with bracketed placeholders in place of child and parent data."""
    return fill_contract(template_text, {**trip_values(trip), **PREVIEW_PLACEHOLDERS})
