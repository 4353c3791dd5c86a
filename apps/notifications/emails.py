"""
Transactional e-mails.

Each e-mail has a built-in default (subject and HTML body with
``{{key}}`` placeholders). An ``EmailTemplate`` row with the same key
overrides the default, so admins can reword messages without a deploy.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from django.conf import settings
from django.utils.html import conditional_escape, format_html, format_html_join, mark_safe

from apps.trips.formatting import (
    PAYMENT_METHOD_LABELS,
    format_amount,
    polish_date,
    polish_datetime,
)

from .mailer import EmailResult, send_email
from .models import EmailTemplate

logger = logging.getLogger(__name__)


# =============================================================================
# Default templates
# =============================================================================

_BUTTON = (
    '<table cellpadding="0" cellspacing="0" style="margin:0 0 24px;"><tr>'
    '<td style="background:#1e56d9;border-radius:10px;padding:12px 28px;">'
    '<a href="{{link}}" style="color:#ffffff;font-size:15px;font-weight:bold;text-decoration:none;">'
    '%s →</a></td></tr></table>'
)

EMAIL_TEMPLATE_DEFAULTS = {
    'welcome': {
        'name': 'Powitanie po rejestracji',
        'subject': 'Witaj w BiegunSport! 🎿',
        'body_html': (
            '<h1 style="margin:0 0 8px;font-size:24px;color:#111827;">Witaj, {{imie}}! 👋</h1>'
            '<p style="margin:0 0 24px;font-size:15px;color:#4b5563;line-height:1.7;">'
            'Twoje konto w systemie BiegunSport zostało pomyślnie utworzone.<br/>'
            'Możesz teraz dodać swoje dziecko i zapisać je na wyjazd narciarski.</p>'
            + _BUTTON % 'Przejdź do aplikacji'
        ),
        'variables': [
            {'key': 'imie', 'desc': 'Imię rodzica'},
            {'key': 'link', 'desc': 'Link do aplikacji'},
        ],
    },
    'password_reset': {
        'name': 'Reset hasła',
        'subject': 'Reset hasła w BiegunSport',
        'body_html': (
            '<h1 style="margin:0 0 8px;font-size:24px;color:#111827;">Reset hasła 🔑</h1>'
            '<p style="margin:0 0 24px;font-size:15px;color:#4b5563;line-height:1.7;">'
            'Cześć {{imie}},<br/>otrzymaliśmy prośbę o zmianę hasła do Twojego konta. '
            'Jeśli to nie Ty, zignoruj tę wiadomość.</p>'
            + _BUTTON % 'Ustaw nowe hasło'
        ),
        'variables': [
            {'key': 'imie', 'desc': 'Imię rodzica'},
            {'key': 'link', 'desc': 'Link do ustawienia nowego hasła'},
        ],
    },
    'registration_confirmation': {
        'name': 'Potwierdzenie zapisu',
        'subject': '✅ {{dziecko}} zapisany/a na: {{wyjazd}}',
        'body_html': (
            '<h1 style="margin:0 0 8px;font-size:24px;color:#111827;">Potwierdzenie zapisu ✅</h1>'
            '<p style="margin:0 0 24px;font-size:15px;color:#4b5563;line-height:1.7;">'
            'Cześć {{imie}},<br/><strong>{{dziecko}}</strong> został/a pomyślnie zapisany/a na wyjazd:</p>'
            '{{szczegoly_wyjazdu}}'
            + _BUTTON % 'Zobacz płatności'
        ),
        'variables': [
            {'key': 'imie', 'desc': 'Imię rodzica'},
            {'key': 'dziecko', 'desc': 'Imię i nazwisko dziecka'},
            {'key': 'wyjazd', 'desc': 'Tytuł wyjazdu'},
            {'key': 'szczegoly_wyjazdu', 'desc': 'Szczegóły wyjazdu i płatności (HTML)'},
            {'key': 'link', 'desc': 'Link do płatności'},
        ],
    },
    'payment_reminder': {
        'name': 'Przypomnienie o płatności',
        'subject': '⏰ Przypomnienie o płatności — {{wyjazd}}',
        'body_html': (
            '<h1 style="margin:0 0 8px;font-size:24px;color:#111827;">Przypomnienie o płatności ⏰</h1>'
            '<p style="margin:0 0 24px;font-size:15px;color:#4b5563;line-height:1.7;">'
            'Cześć {{imie}},<br/>przypominamy o zbliżającym się terminie płatności dla '
            '<strong>{{dziecko}}</strong>.</p>'
            '<table width="100%" cellpadding="0" cellspacing="0" style="background:#fff7ed;'
            'border:1px solid #fed7aa;border-radius:12px;padding:20px 24px;margin:0 0 24px;"><tr><td>'
            '<p style="margin:0 0 4px;font-size:16px;font-weight:bold;color:#111827;">{{wyjazd}}</p>'
            '<p style="margin:0 0 8px;font-size:14px;color:#6b7280;">{{rata}}</p>'
            '<p style="margin:0 0 4px;font-size:22px;font-weight:bold;color:#ea580c;">{{kwota}} {{waluta}}</p>'
            '<p style="margin:0;font-size:14px;color:#6b7280;">Termin: <strong>{{termin}}</strong></p>'
            '<p style="margin:8px 0 0;font-size:13px;color:#6b7280;">Numer konta: {{konto}}</p>'
            '</td></tr></table>'
            + _BUTTON % 'Przejdź do płatności'
        ),
        'variables': [
            {'key': 'imie', 'desc': 'Imię rodzica'},
            {'key': 'dziecko', 'desc': 'Imię i nazwisko dziecka'},
            {'key': 'wyjazd', 'desc': 'Tytuł wyjazdu'},
            {'key': 'rata', 'desc': 'Nazwa płatności'},
            {'key': 'kwota', 'desc': 'Kwota do zapłaty'},
            {'key': 'waluta', 'desc': 'Waluta'},
            {'key': 'termin', 'desc': 'Termin płatności'},
            {'key': 'konto', 'desc': 'Numer konta'},
            {'key': 'link', 'desc': 'Link do płatności'},
        ],
    },
    'payment_confirmed': {
        'name': 'Potwierdzenie płatności',
        'subject': '✅ Płatność przyjęta — {{wyjazd}}',
        'body_html': (
            '<h1 style="margin:0 0 8px;font-size:24px;color:#111827;">Płatność potwierdzona ✅</h1>'
            '<p style="margin:0 0 24px;font-size:15px;color:#4b5563;line-height:1.7;">'
            'Cześć {{imie}},<br/>płatność dla <strong>{{dziecko}}</strong> została zarejestrowana.</p>'
            '<table width="100%" cellpadding="0" cellspacing="0" style="background:#f0fdf4;'
            'border:1px solid #bbf7d0;border-radius:12px;padding:20px 24px;margin:0 0 24px;"><tr><td>'
            '<p style="margin:0 0 4px;font-size:16px;font-weight:bold;color:#111827;">{{wyjazd}}</p>'
            '<p style="margin:0 0 8px;font-size:14px;color:#6b7280;">{{rata}}</p>'
            '<p style="margin:0;font-size:22px;font-weight:bold;color:#16a34a;">{{kwota}} {{waluta}} — opłacone</p>'
            '</td></tr></table>'
            + _BUTTON % 'Zobacz wszystkie płatności'
        ),
        'variables': [
            {'key': 'imie', 'desc': 'Imię rodzica'},
            {'key': 'dziecko', 'desc': 'Imię i nazwisko dziecka'},
            {'key': 'wyjazd', 'desc': 'Tytuł wyjazdu'},
            {'key': 'rata', 'desc': 'Nazwa płatności'},
            {'key': 'kwota', 'desc': 'Kwota'},
            {'key': 'waluta', 'desc': 'Waluta'},
            {'key': 'link', 'desc': 'Link do płatności'},
        ],
    },
    'trip_info': {
        'name': 'Informacja o wyjeździe',
        'subject': '{{wyjazd}} – informacja o wyjeździe',
        'body_html': (
            '<h2>Informacja o wyjeździe 🏔️</h2><p>Szanowni Rodzice,</p>'
            '<p>Przekazujemy informacje o planowanym wyjeździe <strong>{{wyjazd}}</strong>.</p>'
            '{{szczegoly_wyjazdu}}'
            '<p>W razie pytań prosimy o kontakt.</p>'
            '<p>Pozdrawiamy,<br><strong>Zespół BiegunSport</strong></p>'
        ),
        'variables': [
            {'key': 'wyjazd', 'desc': 'Tytuł wyjazdu'},
            {'key': 'szczegoly_wyjazdu', 'desc': 'Szczegóły wyjazdu i płatności (HTML)'},
        ],
    },
}


# =============================================================================
# Rendering
# =============================================================================

def fill_placeholders(text: str, values: Dict[str, object], escape: bool = False) -> str:
    """
    Replace every ``{{key}}`` with its value. Unknown placeholders stay.

    With ``escape`` values are HTML-escaped unless already marked safe.
    """
    for key, value in values.items():
        value = '' if value is None else value
        replacement = conditional_escape(value) if escape else str(value)
        text = text.replace('{{%s}}' % key, replacement)
    return text


def get_template_source(key: str) -> Tuple[str, str]:
    """Subject and body for a key: the database override or the default."""
    override = EmailTemplate.objects.filter(id=key).first()
    if override is not None:
        return override.subject, override.body_html
    default = EMAIL_TEMPLATE_DEFAULTS[key]
    return default['subject'], default['body_html']


def render_email(key: str, values: Dict[str, object]) -> Tuple[str, str]:
    subject, body = get_template_source(key)
    return fill_placeholders(subject, values), fill_placeholders(body, values, escape=True)


def _link(path: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}{path}"


def _first_name(user) -> str:
    return user.first_name or user.get_full_name()


# =============================================================================
# Trip details block
# =============================================================================

def template_payment_lines(templates: Iterable, birth_year: Optional[int] = None) -> List[Dict[str, object]]:
    """
    Payment lines from trip payment templates.

    With ``birth_year`` season passes outside the child's range are left out.
    """
    lines = []
    for template in templates:
        if (
            birth_year is not None
            and template.payment_type == 'season_pass'
            and not template.matches_birth_year(birth_year)
        ):
            continue
        lines.append({
            'label': template.label,
            'amount': template.amount,
            'currency': template.currency,
            'due_date': template.due_date,
            'payment_method': template.payment_method,
        })
    return lines


def registration_payment_lines(registration) -> List[Dict[str, object]]:
    return [
        {
            'label': payment.label,
            'amount': payment.amount,
            'currency': payment.currency,
            'due_date': payment.due_date,
            'payment_method': payment.template.payment_method if payment.template else '',
        }
        for payment in registration.payments.exclude(status='cancelled').select_related('template')
    ]


def _stop_rows(label, when, where, stop2_when, stop2_where):
    rows = [(label, f"{polish_datetime(when)} — {where}")]
    if stop2_where:
        rows.append((f"{label} (przystanek 2)", f"{polish_datetime(stop2_when)} — {stop2_where}"))
    return rows


def build_trip_details_html(trip, payment_lines: List[Dict[str, object]]) -> str:
    """HTML block with the schedule, payments and bank accounts of a trip."""
    rows = []
    if trip.location:
        rows.append(('Miejsce', trip.location))
    rows += _stop_rows(
        'Wyjazd', trip.departure_datetime, trip.departure_location,
        trip.departure_stop2_datetime, trip.departure_stop2_location,
    )
    rows += _stop_rows(
        'Powrót', trip.return_datetime, trip.return_location,
        trip.return_stop2_datetime, trip.return_stop2_location,
    )
    if trip.declaration_deadline:
        rows.append(('Deklaracja do', polish_date(trip.declaration_deadline)))

    schedule = format_html_join(
        '',
        '<tr><td style="padding:4px 12px 4px 0;color:#6b7280;">{}</td>'
        '<td style="padding:4px 0;color:#111827;">{}</td></tr>',
        rows,
    )

    payments = format_html_join(
        '',
        '<li>{}: <strong>{} {}</strong> (termin: {}, {})</li>',
        (
            (
                line['label'],
                format_amount(line['amount']),
                line['currency'],
                polish_date(line['due_date']) or 'do uzgodnienia',
                PAYMENT_METHOD_LABELS.get(line['payment_method'], line['payment_method'] or 'przelew'),
            )
            for line in payment_lines
        ),
    )

    payments_block = (
        format_html('<p style="margin:16px 0 4px;font-weight:bold;">Płatności</p><ul>{}</ul>', payments)
        if payment_lines else ''
    )
    accounts = format_html(
        '<p style="margin:16px 0 0;font-size:13px;color:#6b7280;">'
        'Konto PLN: {}<br/>Konto EUR: {}</p>',
        trip.bank_account_pln or settings.DEFAULT_BANK_ACCOUNT_PLN,
        trip.bank_account_eur or settings.DEFAULT_BANK_ACCOUNT_EUR,
    )

    return format_html(
        '<table width="100%" cellpadding="0" cellspacing="0" style="background:#f8f9fb;'
        'border-radius:12px;padding:20px 24px;margin:0 0 24px;"><tr><td>'
        '<p style="margin:0 0 8px;font-size:18px;font-weight:bold;color:#111827;">{}</p>'
        '<table cellpadding="0" cellspacing="0">{}</table>{}{}'
        '</td></tr></table>',
        trip.title, schedule, payments_block, accounts,
    )


def render_trip_info(trip, payment_lines: Optional[List[Dict[str, object]]] = None) -> Tuple[str, str]:
    """Subject and HTML body of the trip info e-mail."""
    if payment_lines is None:
        payment_lines = template_payment_lines(trip.payment_templates.all())
    return render_email('trip_info', {
        'wyjazd': trip.title,
        'szczegoly_wyjazdu': mark_safe(build_trip_details_html(trip, payment_lines)),
    })


# =============================================================================
# Senders
# =============================================================================

def send_welcome_email(user) -> EmailResult:
    subject, html = render_email('welcome', {
        'imie': _first_name(user),
        'link': _link('/parent/children'),
    })
    return send_email(to=user.email, subject=subject, html=html)


def send_password_reset_email(user, token: str) -> EmailResult:
    subject, html = render_email('password_reset', {
        'imie': _first_name(user),
        'link': _link(f'/reset-password?token={token}'),
    })
    return send_email(to=user.email, subject=subject, html=html)


def send_registration_confirmation_email(registration) -> EmailResult:
    participant = registration.participant
    parent = participant.parent
    trip = registration.trip
    details = build_trip_details_html(trip, registration_payment_lines(registration))

    subject, html = render_email('registration_confirmation', {
        'imie': _first_name(parent),
        'dziecko': participant.full_name,
        'wyjazd': trip.title,
        'szczegoly_wyjazdu': mark_safe(details),
        'link': _link('/parent/payments'),
    })
    return send_email(to=parent.email, subject=subject, html=html)


def _bank_account(payment) -> str:
    trip = payment.registration.trip
    if payment.currency == 'EUR':
        return trip.bank_account_eur or settings.DEFAULT_BANK_ACCOUNT_EUR
    return trip.bank_account_pln or settings.DEFAULT_BANK_ACCOUNT_PLN


def send_payment_reminder_email(payment) -> EmailResult:
    registration = payment.registration
    parent = registration.participant.parent
    subject, html = render_email('payment_reminder', {
        'imie': _first_name(parent),
        'dziecko': registration.participant.full_name,
        'wyjazd': registration.trip.title,
        'rata': payment.label,
        'kwota': format_amount(payment.remaining_amount),
        'waluta': payment.currency,
        'termin': polish_date(payment.due_date),
        'konto': _bank_account(payment),
        'link': _link('/parent/payments'),
    })
    return send_email(to=parent.email, subject=subject, html=html)


def send_payment_confirmed_email(payment) -> EmailResult:
    registration = payment.registration
    parent = registration.participant.parent
    subject, html = render_email('payment_confirmed', {
        'imie': _first_name(parent),
        'dziecko': registration.participant.full_name,
        'wyjazd': registration.trip.title,
        'rata': payment.label,
        'kwota': format_amount(payment.amount),
        'waluta': payment.currency,
        'link': _link('/parent/payments'),
    })
    return send_email(to=parent.email, subject=subject, html=html)
