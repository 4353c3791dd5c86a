"""
Parsers for the raw text columns of the legacy spreadsheets.

Each parser is lenient: unreadable input yields None (or a documented
fallback) and the import run decides whether that is an error.
"""

import re
from datetime import date, time
from decimal import Decimal
from typing import List, NamedTuple, Optional

from apps.trips.models import TemplatePaymentMethod

DEFAULT_TIME = time(8, 0)

_TIME_RE = re.compile(r'^(\d{1,2}):(\d{2})$')
_AMOUNT_RE = re.compile(r'^[-+]?\d+(\.\d+)?')
_SEASON_PASS_RE = re.compile(r'(\d{4})[^\d]*(\d{4})?[^\d]*(\d+)')


class SeasonPassRule(NamedTuple):
    year_from: int
    year_to: int
    amount: Decimal

    @property
    def category_name(self):
        if self.year_from == self.year_to:
            return str(self.year_from)
        return f"{self.year_from}-{self.year_to}"


def parse_legacy_date(value: str) -> Optional[date]:
    """``DD.MM.YYYY`` or ``D.M.YYYY`` to a date; None when unreadable."""
    parts = (value or '').strip().split('.')
    if len(parts) != 3:
        return None
    day, month, year = (part.strip() for part in parts)
    if len(year) != 4 or not (day.isdigit() and month.isdigit() and year.isdigit()):
        return None
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_time(value: str) -> time:
    """``HH:MM`` or ``H:MM``; anything else falls back to 08:00."""
    match = _TIME_RE.match((value or '').strip())
    if not match:
        return DEFAULT_TIME
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return DEFAULT_TIME
    return time(hours, minutes)


def parse_amount(value: str) -> Decimal:
    """
    Amount such as ``1 200,50`` or ``350 zł``.

    Whitespace is dropped and the first comma becomes a dot; the leading
    number is used. Unreadable input is zero.
    """
    cleaned = re.sub(r'\s', '', value or '').replace(',', '.', 1)
    match = _AMOUNT_RE.match(cleaned)
    if not match:
        return Decimal('0')
    return Decimal(match.group(0))


def parse_payment_method(value: str) -> str:
    """``gotówka`` is cash, ``przelew`` is transfer; anything else (or both words) is both."""
    lower = (value or '').strip().lower()
    has_cash = 'gotówka' in lower
    has_transfer = 'przelew' in lower
    if has_cash and not has_transfer:
        return TemplatePaymentMethod.CASH
    if has_transfer and not has_cash:
        return TemplatePaymentMethod.TRANSFER
    return TemplatePaymentMethod.BOTH


def parse_season_pass_rules(value: str) -> List[SeasonPassRule]:
    """
    Comma-separated rules like ``rocznik 2015-2016: 200 PLN, 2017: 180``.

    A rule without a second year covers a single birth year. Rules with no
    match or a zero amount are skipped.
    """
    rules = []
    for chunk in (value or '').split(','):
        match = _SEASON_PASS_RE.search(chunk.strip())
        if not match:
            continue
        year_from = int(match.group(1))
        year_to = int(match.group(2)) if match.group(2) else year_from
        amount = Decimal(match.group(3))
        if amount > 0:
            rules.append(SeasonPassRule(year_from, year_to, amount))
    return rules


def normalize_phone(value: str) -> str:
    """Digits only."""
    return re.sub(r'\D', '', value or '')
