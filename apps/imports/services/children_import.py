"""
Children import service.

Turns staged spreadsheet rows into parent accounts, children and group
assignments. Rows are imported one by one; a failing row is marked with
its error and never rolls back the others.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from django.db import DatabaseError, transaction
from django.utils.crypto import get_random_string

from apps.accounts.models import User, UserRole
from apps.groups.models import Group, ParticipantGroup
from apps.groups.services import create_group
from apps.imports.models import ChildImportRow, ImportStatus
from apps.imports.parsing import normalize_phone, parse_legacy_date
from apps.participants.models import Participant

from .exceptions import ImportRowError

logger = logging.getLogger(__name__)

CONTACT_FIELDS = ('phone', 'secondary_email', 'secondary_phone')


def _section_groups(rows) -> Tuple[Dict[str, Group], int]:
    """
    Map upper-cased section names to groups, creating missing ones.

    Returns:
        Tuple of (group map, number of groups created)
    """
    groups = {group.name.strip().upper(): group for group in Group.objects.all()}
    created = 0
    for section in sorted({row.sekcja.strip().upper() for row in rows if row.sekcja.strip()}):
        if section not in groups:
            groups[section] = create_group(name=section)
            created += 1
    return groups, created


def _contact_data(row: ChildImportRow) -> Dict[str, str]:
    return {
        'phone': normalize_phone(row.telefon_1),
        'secondary_email': row.mail_2.strip().lower(),
        'secondary_phone': normalize_phone(row.telefon_2),
    }


def _fill_missing_contact(parent: User, contact: Dict[str, str]) -> None:
    changed = [
        field for field in CONTACT_FIELDS
        if contact[field] and not getattr(parent, field)
    ]
    for field in changed:
        setattr(parent, field, contact[field])
    if changed:
        parent.save(update_fields=changed + ['updated_at'])


def _get_or_create_parent(row: ChildImportRow, email: str) -> Tuple[User, bool]:
    contact = _contact_data(row)
    parent = User.objects.filter(email__iexact=email).first()
    if parent is not None:
        _fill_missing_contact(parent, contact)
        return parent, False

    parent = User.objects.create_user(
        email=email,
        password=get_random_string(16),
        last_name=row.nazwisko_dziecka.strip(),
        role=UserRole.PARENT,
        **contact,
    )
    return parent, True


def _import_row(row: ChildImportRow, groups: Dict[str, Group], imported_by: Optional[User]) -> bool:
    """
    Import a single row.

    Returns:
        True when a new parent account was created

    Raises:
        ImportRowError: If the row fails validation
    """
    email = row.mail_1.strip().lower()
    first_name = row.imie_dziecka.strip()
    last_name = row.nazwisko_dziecka.strip()

    if not email:
        raise ImportRowError('Brak adresu email (mail_1)')
    if not first_name:
        raise ImportRowError('Brak imienia dziecka')
    if not last_name:
        raise ImportRowError('Brak nazwiska dziecka')

    birth_date = parse_legacy_date(row.data_urodzenia)
    if birth_date is None:
        raise ImportRowError(f'Nieprawidłowy format daty: {row.data_urodzenia}')

    parent, created = _get_or_create_parent(row, email)

    participant = Participant.objects.create(
        parent=parent,
        first_name=first_name,
        last_name=last_name,
        birth_date=birth_date,
        notes=f'Import CSV ID: {row.id_dziecka_csv}' if row.id_dziecka_csv else '',
    )

    group = groups.get(row.sekcja.strip().upper())
    if group is not None:
        ParticipantGroup.objects.create(participant=participant, group=group, assigned_by=imported_by)

    return created


def run_children_import(*, imported_by: Optional[User] = None) -> Dict[str, Any]:
    """
    Import every pending children row.

    Args:
        imported_by: Admin running the import (recorded on group assignments)

    Returns:
        Dict with total, imported, errors, skipped, new_parents,
        new_groups and per-row details
    """
    rows = list(ChildImportRow.objects.filter(status_importu=ImportStatus.PENDING).order_by('id'))
    result = {
        'total': len(rows),
        'imported': 0,
        'errors': 0,
        'skipped': 0,
        'new_parents': 0,
        'new_groups': 0,
        'details': [],
    }
    if not rows:
        return result

    groups, result['new_groups'] = _section_groups(rows)

    for row in rows:
        try:
            with transaction.atomic():
                if _import_row(row, groups, imported_by):
                    result['new_parents'] += 1
                row.mark_imported()
        except (ImportRowError, DatabaseError) as e:
            logger.warning("Children import row %s failed: %s", row.id, e)
            row.mark_error(str(e))
            result['errors'] += 1
            result['details'].append({'id': row.id, 'name': row.child_name, 'status': 'error', 'error': str(e)})
            continue

        result['imported'] += 1
        result['details'].append({'id': row.id, 'name': row.child_name, 'status': 'ok'})

    logger.info(
        "Children import: %s imported, %s errors, %s new parents, %s new groups",
        result['imported'], result['errors'], result['new_parents'], result['new_groups'],
    )
    return result


def reset_children_import() -> int:
    """
    Return failed rows to pending.

    Returns:
        Number of rows reset
    """
    return ChildImportRow.objects.filter(status_importu=ImportStatus.ERROR).update(
        status_importu=ImportStatus.PENDING,
        blad_opis='',
    )


def fix_contact_data() -> Dict[str, int]:
    """
    Copy phones and the secondary e-mail of imported rows onto parents.

    The first imported row of each e-mail wins. Parents that are missing
    are counted as errors.

    Returns:
        Dict with fixed and errors counts
    """
    first_rows = {}
    for row in ChildImportRow.objects.filter(status_importu=ImportStatus.IMPORTED).order_by('id'):
        email = row.mail_1.strip().lower()
        if email and email not in first_rows:
            first_rows[email] = _contact_data(row)

    fixed = errors = 0
    for email, contact in first_rows.items():
        changes = {field: value for field, value in contact.items() if value}
        if not changes:
            continue
        if User.objects.filter(email__iexact=email).update(**changes):
            fixed += 1
        else:
            logger.warning("Contact fix: no parent with e-mail %s", email)
            errors += 1

    return {'fixed': fixed, 'errors': errors}

