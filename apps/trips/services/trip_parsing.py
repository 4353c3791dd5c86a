"""
AI-assisted trip form filling.

A free-text trip description is sent to Gemini together with the club's
groups and bus stops. The JSON answer is cleaned up so it can be fed
straight into the trip form.
"""

import json
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import httpx
from django.conf import settings
from django.utils import timezone

from apps.groups.models import Group

from .exceptions import (
    InvalidTripDescriptionError,
    TripParserConfigurationError,
    TripParserRateLimitError,
    TripParserUpstreamError,
)

logger = logging.getLogger(__name__)

PREDEFINED_STOPS = ('BP Pasternik', 'Orlen Opatkowice', 'BP Opatkowice', 'Ikea')
MIN_DESCRIPTION_LENGTH = 10
REQUEST_TIMEOUT = 60.0

ALLOWED_KEYS = frozenset({
    'title', 'description', 'status',
    'departure_datetime', 'departure_location',
    'departure_stop2_datetime', 'departure_stop2_location',
    'return_datetime', 'return_location',
    'return_stop2_datetime', 'return_stop2_location',
    'group_ids', 'payment_templates',
    'bank_account_pln', 'bank_account_eur',
})

STOP2_FIELDS = (
    'departure_stop2_datetime',
    'departure_stop2_location',
    'return_stop2_datetime',
    'return_stop2_location',
)

OUTPUT_FORMAT = """{
  "title": "string - tytuł wyjazdu",
  "description": "string lub pusty string",
  "departure_datetime": "YYYY-MM-DDTHH:mm - data i godzina wyjazdu",
  "departure_location": "string - miejsce wyjazdu (przystanek 1)",
  "departure_stop2_datetime": "YYYY-MM-DDTHH:mm lub null - jeśli jest drugi przystanek",
  "departure_stop2_location": "string lub null",
  "return_datetime": "YYYY-MM-DDTHH:mm - data i godzina powrotu",
  "return_location": "string - miejsce powrotu (przystanek 1)",
  "return_stop2_datetime": "YYYY-MM-DDTHH:mm lub null",
  "return_stop2_location": "string lub null",
  "group_ids": ["array of matching group UUIDs"],
  "payment_templates": [
    {
      "payment_type": "installment",
      "installment_number": 1,
      "is_first_installment": true,
      "includes_season_pass": false,
      "category_name": null,
      "birth_year_from": null,
      "birth_year_to": null,
      "amount": 500,
      "currency": "PLN",
      "due_date": "YYYY-MM-DD lub null",
      "payment_method": "transfer"
    }
  ]
}"""

RULES = """1. Daty wyjazdu/powrotu: format YYYY-MM-DDTHH:mm
2. Terminy płatności (due_date): format YYYY-MM-DD
3. Dopasuj nazwy grup do dostępnych grup powyżej i użyj ich UUID. Np. "grupa 2015" → dopasuj do grupy o nazwie zawierającej "2015"
4. Jeśli ktoś mówi "w dniu wyjazdu" przy płatności, ustaw due_date na datę wyjazdu (tylko YYYY-MM-DD) i payment_method na "cash"
5. Domyślna waluta: PLN
6. Domyślna metoda płatności: "transfer"
7. Twórz osobne obiekty w payment_templates dla każdej raty
8. Rata 1 → installment_number: 1, is_first_installment: true
9. Rata 2, 3 itd. → is_first_installment: false
10. Dla "karnet" → payment_type: "season_pass"
11. NIE wymyślaj danych których nie ma w opisie — pomiń pola lub zostaw null
12. Przystanki powrotu zazwyczaj są takie same jak wyjazdu (w odwrotnej kolejności) chyba że zaznaczono inaczej
13. Jeśli rok nie jest podany, użyj {year}
14. Jeśli miejsce powrotu nie jest podane, użyj tego samego co wyjazd"""


def _group_entries(groups: Iterable[Group]) -> List[Dict[str, str]]:
    return [{'id': str(group.id), 'name': group.name} for group in groups]


def build_prompt(text: str, groups: List[Dict[str, str]], today: Optional[date] = None) -> str:
    """Polish instruction prompt listing groups, stops and the expected JSON shape."""
    today = today or timezone.localdate()
    group_list = '\n'.join(f'  - "{g["name"]}" (id: "{g["id"]}")' for g in groups)
    stop_list = '\n'.join(f'  - "{stop}"' for stop in PREDEFINED_STOPS)

    return (
        "Jesteś asystentem do wypełniania formularzy wyjazdów sportowych dla dzieci.\n"
        "Na podstawie poniższego opisu wyjazdu, wyodrębnij dane i zwróć je jako JSON.\n\n"
        f"DOSTĘPNE GRUPY:\n{group_list}\n\n"
        f"PREDEFINIOWANE PRZYSTANKI (użyj dokładnej nazwy jeśli pasuje):\n{stop_list}\n\n"
        f"DZISIEJSZA DATA: {today.isoformat()}\n\n"
        f"FORMAT WYJŚCIOWY (JSON):\n{OUTPUT_FORMAT}\n\n"
        f"ZASADY:\n{RULES.format(year=today.year)}\n\n"
        f'OPIS WYJAZDU:\n"{text}"\n\n'
        "Odpowiedz TYLKO poprawnym JSON-em, bez komentarzy ani markdown."
    )


def post_process(parsed: Dict[str, Any], groups: List[Dict[str, str]]) -> Dict[str, Any]:
    """
    Clean up the model answer for the trip form.

    Unknown group ids are dropped, payment methods get defaults
    (cash for payments due on the departure day), status defaults to
    draft, null second stops become empty strings and unknown keys are
    removed.
    """
    result = dict(parsed)

    if isinstance(result.get('group_ids'), list):
        valid_ids = {g['id'] for g in groups}
        result['group_ids'] = [gid for gid in result['group_ids'] if gid in valid_ids]

    departure = result.get('departure_datetime')
    if isinstance(result.get('payment_templates'), list) and departure:
        departure_date = str(departure).split('T')[0]
        for template in result['payment_templates']:
            if not isinstance(template, dict):
                continue
            if template.get('due_date') == departure_date and not template.get('payment_method'):
                template['payment_method'] = 'cash'
            if not template.get('payment_method'):
                template['payment_method'] = 'transfer'

    if not result.get('status'):
        result['status'] = 'draft'

    for field in STOP2_FIELDS:
        if field in result and result[field] is None:
            result[field] = ''

    return {key: value for key, value in result.items() if key in ALLOWED_KEYS}


def _extract_text(payload: Dict[str, Any]) -> Optional[str]:
    try:
        return payload['candidates'][0]['content']['parts'][0]['text']
    except (KeyError, IndexError, TypeError):
        return None


def parse_trip_description(
    *,
    text: str,
    groups: Optional[Iterable[Group]] = None,
    transport: Optional[httpx.BaseTransport] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Turn a free-text trip description into trip form data.

    Args:
        text: Description written by the admin (min 10 characters)
        groups: Groups the model may pick from (defaults to all groups)
        transport: Optional httpx transport (used in tests)
        today: Reference date for the prompt

    Returns:
        Post-processed trip data

    Raises:
        InvalidTripDescriptionError: If the text is too short
        TripParserConfigurationError: If GEMINI_API_KEY is not set
        TripParserRateLimitError: If Gemini answers 429
        TripParserUpstreamError: On any other upstream failure or unusable answer
    """
    text = (text or '').strip()
    if len(text) < MIN_DESCRIPTION_LENGTH:
        raise InvalidTripDescriptionError(
            f"Trip description is too short (min. {MIN_DESCRIPTION_LENGTH} characters)"
        )

    api_key = settings.GEMINI_API_KEY
    if not api_key:
        raise TripParserConfigurationError("GEMINI_API_KEY is not configured")

    group_entries = _group_entries(groups if groups is not None else Group.objects.all())
    prompt = build_prompt(text, group_entries, today=today)

    url = f"{settings.GEMINI_API_URL}/{settings.GEMINI_MODEL}:generateContent"
    body = {
        'contents': [{'parts': [{'text': prompt}]}],
        'generationConfig': {
            'temperature': 0.1,
            'responseMimeType': 'application/json',
        },
    }

    try:
        with httpx.Client(timeout=REQUEST_TIMEOUT, transport=transport) as client:
            response = client.post(url, params={'key': api_key}, json=body)
    except httpx.HTTPError as e:
        logger.warning("Gemini request failed: %s", e)
        raise TripParserUpstreamError("AI service is unreachable") from e

    if response.status_code == 429:
        raise TripParserRateLimitError("Too many AI requests, try again shortly")
    if response.is_error:
        logger.warning("Gemini API error %s: %s", response.status_code, response.text[:500])
        raise TripParserUpstreamError("AI service returned an error")

    try:
        raw_text = _extract_text(response.json())
    except ValueError as e:
        raise TripParserUpstreamError("AI service returned an invalid response") from e
    if not raw_text:
        raise TripParserUpstreamError("AI service returned no answer")

    try:
        parsed = json.loads(raw_text)
    except ValueError as e:
        logger.warning("Unparsable AI answer: %s", raw_text[:500])
        raise TripParserUpstreamError("Could not process the AI answer") from e
    if not isinstance(parsed, dict):
        raise TripParserUpstreamError("Could not process the AI answer")

    return post_process(parsed, group_entries)
