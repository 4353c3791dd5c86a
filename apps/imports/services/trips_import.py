"""
Trips import service.

Creates draft trips with installment and season-pass templates from the
staged trips spreadsheet.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.groups.models import Group
from apps.groups.services import create_group
from apps.imports.models import TripImportRow, ImportStatus
from apps.imports.parsing import (
    parse_amount,
    parse_legacy_date,
    parse_payment_method,
    parse_season_pass_rules,
    parse_time,
)
from apps.trips.models import Currency, PaymentType, TripStatus
from apps.trips.services import create_trip

from .exceptions import ImportRowError

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = 'Do ustalenia'


def _load_groups() -> Dict[str, Group]:
    return {group.name.strip().lower(): group for group in Group.objects.all()}


def _find_or_create_group(section: str, groups: Dict[str, Group]) -> Optional[Group]:
    key = section.strip().lower()
    if not key:
        return None
    if key not in groups:
        groups[key] = create_group(name=section.strip())
    return groups[key]


def _local_datetime(day, time_text):
    return timezone.make_aware(datetime.combine(day, parse_time(time_text)))


def _installment_templates(row: TripImportRow) -> List[Dict[str, Any]]:
    templates = []
    installments = (
        (1, row.kwota_1, row.termin_1, row.forma_platnosci_1),
        (2, row.kwota_2, row.termin_2, row.forma_platnosci_2),
    )
    for number, amount_text, due_text, method_text in installments:
        amount = parse_amount(amount_text)
        if amount <= 0:
            continue
        templates.append({
            'payment_type': PaymentType.INSTALLMENT,
            'installment_number': number,
            'is_first_installment': number == 1,
            'amount': amount,
            'currency': Currency.PLN,
            'due_date': parse_legacy_date(due_text),
            'payment_method': parse_payment_method(method_text),
        })
    return templates


def _season_pass_templates(row: TripImportRow) -> List[Dict[str, Any]]:
    method = parse_payment_method(row.forma_platnosci_karnet)
    return [
        {
            'payment_type': PaymentType.SEASON_PASS,
            'category_name': rule.category_name,
            'birth_year_from': rule.year_from,
            'birth_year_to': rule.year_to,
            'amount': rule.amount,
            'currency': Currency.PLN,
            'payment_method': method,
        }
        for rule in parse_season_pass_rules(row.karnety_reguly)
    ]


def _import_row(row: TripImportRow, groups: Dict[str, Group], imported_by: Optional[User]):
    """
    Create the trip of a single row.

    Raises:
        ImportRowError: If the row fails validation
    """
    title = row.tytul_wyjazdu.strip()
    if not title:
        raise ImportRowError('Brak tytułu wyjazdu')

    departure_date = parse_legacy_date(row.data_wyjazdu)
    if departure_date is None:
        raise ImportRowError('Nieprawidłowa data wyjazdu')
    return_date = parse_legacy_date(row.data_powrotu)
    if return_date is None:
        raise ImportRowError('Nieprawidłowa data powrotu')

    description = '\n\n'.join(part for part in (row.opis.strip(), row.info.strip()) if part)
    group = _find_or_create_group(row.sekcja, groups)

    return create_trip(
        created_by=imported_by,
        groups=[group] if group else [],
        payment_templates=_installment_templates(row) + _season_pass_templates(row),
        title=title,
        description=description,
        departure_datetime=_local_datetime(departure_date, row.godzina_wyjazdu),
        departure_location=row.miejsce_wyjazdu.strip() or DEFAULT_LOCATION,
        return_datetime=_local_datetime(return_date, row.godzina_powrotu),
        return_location=row.miejsce_powrotu.strip() or DEFAULT_LOCATION,
        status=TripStatus.DRAFT,
        bank_account_pln=settings.DEFAULT_BANK_ACCOUNT_PLN,
        bank_account_eur=settings.DEFAULT_BANK_ACCOUNT_EUR,
    )


def run_trips_import(*, imported_by: Optional[User] = None) -> Dict[str, Any]:
    """
    Import every pending trips row as a draft trip.

    Args:
        imported_by: Admin running the import (trip author)

    Returns:
        Dict with success, imported, errors and error_details
    """
    rows = list(TripImportRow.objects.filter(status_importu=ImportStatus.PENDING).order_by('id'))
    result = {'success': True, 'imported': 0, 'errors': 0, 'error_details': []}
    if not rows:
        result['error_details'].append('Brak rekordów do zaimportowania')
        return result

    groups = _load_groups()

    for row in rows:
        try:
            with transaction.atomic():
                trip = _import_row(row, groups, imported_by)
                row.mark_imported()
        except (ImportRowError, DatabaseError) as e:
            logger.warning("Trips import row %s failed: %s", row.id, e)
            row.mark_error(str(e))
            # Groups created inside the rolled-back savepoint are gone
            groups = _load_groups()
            result['errors'] += 1
            result['error_details'].append(
                f"Rekord {row.id} ({row.tytul_wyjazdu.strip() or 'bez tytułu'}): {e}"
            )
            continue

        result['imported'] += 1
        logger.info("Imported trip %s from row %s", trip.id, row.id)

    result['success'] = result['errors'] == 0
    return result


def reset_trips_import(*, row_ids: Optional[Iterable[int]] = None) -> int:
    """
    Return rows to pending so they can be imported again.

    Args:
        row_ids: Rows to reset; all rows when empty

    Returns:
        Number of rows reset
    """
    qs = TripImportRow.objects.all()
    if row_ids:
        qs = qs.filter(id__in=list(row_ids))
    return qs.update(status_importu=ImportStatus.PENDING, blad_opis='')
