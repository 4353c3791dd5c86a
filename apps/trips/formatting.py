"""Polish date and amount formatting for contracts and e-mails."""

from datetime import datetime
from decimal import Decimal

from django.utils import dateformat, timezone, translation

PAYMENT_METHOD_LABELS = {
    'cash': 'gotówka',
    'transfer': 'przelew',
    'both': 'gotówka lub przelew',
}


def _local(value):
    if isinstance(value, datetime) and timezone.is_aware(value):
        return timezone.localtime(value)
    return value


def polish_date(value) -> str:
    """``19 października 2026``. Empty string for None."""
    if value is None:
        return ''
    with translation.override('pl'):
        return dateformat.format(_local(value), 'j E Y')


def polish_datetime(value) -> str:
    """``poniedziałek, 19 października 2026, 07:30``."""
    if value is None:
        return ''
    with translation.override('pl'):
        return dateformat.format(_local(value), 'l, j E Y, H:i')


def format_amount(amount) -> str:
    """Whole-number amount as shown to parents (``1200``)."""
    return f"{Decimal(amount):.0f}"
