"""
Staging of legacy spreadsheets.

Uploaded CSV files land in the buffer tables as pending rows; the
import runs read them from there.
"""

import csv
import io
import logging
from typing import Dict, Optional

from django.db import transaction
from django.db.models import Count, QuerySet

from apps.imports.models import ChildImportRow, TripImportRow, ImportStatus

from .exceptions import InvalidCSVError

logger = logging.getLogger(__name__)

BUFFER_MODELS = {
    'children': ChildImportRow,
    'trips': TripImportRow,
}

# Columns the import runs manage themselves
MANAGED_COLUMNS = {'id', 'status_importu', 'blad_opis', 'created_at'}


def get_buffer_model(kind: str):
    try:
        return BUFFER_MODELS[kind]
    except KeyError:
        raise InvalidCSVError(f"Unknown import kind: {kind}")


def _data_columns(model) -> set:
    return {field.name for field in model._meta.concrete_fields} - MANAGED_COLUMNS


def _decode(upload) -> str:
    raw = upload.read()
    try:
        return raw.decode('utf-8-sig')
    except UnicodeDecodeError:
        return raw.decode('cp1250')


@transaction.atomic
def stage_csv(*, kind: str, upload) -> Dict[str, object]:
    """
    Add the rows of an uploaded CSV to a buffer table.

    Headers must use the buffer column names; unknown columns are ignored.
    Blank lines are skipped. The delimiter (comma or semicolon) is sniffed.

    Args:
        kind: ``children`` or ``trips``
        upload: File-like object with the CSV bytes

    Returns:
        Dict with created count and ignored column names

    Raises:
        InvalidCSVError: If the file has no usable header
    """
    model = get_buffer_model(kind)
    data = _decode(upload)
    if not data.strip():
        raise InvalidCSVError("CSV file is empty")

    try:
        dialect = csv.Sniffer().sniff(data.splitlines()[0], delimiters=',;')
    except csv.Error:
        dialect = csv.excel
    reader = csv.DictReader(io.StringIO(data), dialect=dialect)

    headers = [header.strip() for header in (reader.fieldnames or []) if header]
    columns = _data_columns(model)
    known = [header for header in headers if header in columns]
    if not known:
        raise InvalidCSVError(
            f"CSV file has no known columns. Expected some of: {', '.join(sorted(columns))}"
        )

    rows = []
    for record in reader:
        values = {
            key.strip(): (value or '').strip()
            for key, value in record.items()
            if key and key.strip() in columns
        }
        if not any(values.values()):
            continue
        rows.append(model(**values))

    model.objects.bulk_create(rows)
    ignored = sorted(set(headers) - set(known))
    logger.info("Staged %s %s row(s), ignored columns: %s", len(rows), kind, ignored)
    return {'created': len(rows), 'ignored_columns': ignored}


def get_import_stats(*, kind: str) -> Dict[str, int]:
    """Row counts of a buffer table per import status."""
    model = get_buffer_model(kind)
    stats = {'total': 0, **{status.value: 0 for status in ImportStatus}}
    counts = model.objects.values_list('status_importu').annotate(count=Count('id')).order_by()
    for status, count in counts:
        stats[status] = count
        stats['total'] += count
    return stats


def list_import_rows(*, kind: str, status: Optional[str] = None) -> QuerySet:
    """Buffer rows in file order, optionally by status."""
    qs = get_buffer_model(kind).objects.all()
    if status:
        qs = qs.filter(status_importu=status)
    return qs.order_by('id')

