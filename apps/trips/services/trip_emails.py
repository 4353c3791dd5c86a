"""
Trip information e-mails to the parents of a trip's groups.
"""

import logging
from typing import Dict, Optional
from uuid import UUID

from apps.participants.models import Participant
from apps.notifications.emails import (
    render_trip_info,
    template_payment_lines,
)
from apps.notifications.mailer import send_email

from .exceptions import TripEmailError
from .trip_management import get_trip_by_id

logger = logging.getLogger(__name__)


def get_trip_email_preview(*, trip_id: UUID) -> Dict[str, str]:
    """
    Render the trip info e-mail with every payment of the trip.

    Returns:
        {'subject': str, 'html': str}
    """
    trip = get_trip_by_id(trip_id=trip_id)
    subject, html = render_trip_info(trip)
    return {'subject': subject, 'html': html}


def send_trip_info_email(
    *,
    trip_id: UUID,
    subject: Optional[str] = None,
    body_html: Optional[str] = None,
) -> Dict[str, int]:
    """
    E-mail every parent of a child in the trip's groups, once per parent.

    With ``body_html`` the admin-edited message goes to everybody as is.
    Otherwise the message is rendered per parent, listing only the season
    passes that match the child's birth year.

    Returns:
        {'sent': int, 'skipped': int}

    Raises:
        TripNotFoundError: If the trip doesn't exist
        TripEmailError: If the trip has no groups or the groups have no children
    """
    trip = get_trip_by_id(trip_id=trip_id)
    group_ids = [trip_group.group_id for trip_group in trip.trip_groups.all()]
    if not group_ids:
        raise TripEmailError("The trip has no groups assigned")

    children = (
        Participant.objects
        .filter(group_assignment__group_id__in=group_ids)
        .select_related('parent')
        .order_by('last_name', 'first_name')
    )
    if not children.exists():
        raise TripEmailError("There are no participants in the trip's groups")

    recipients = {}
    for child in children:
        if child.parent.email and child.parent_id not in recipients:
            recipients[child.parent_id] = child

    templates = list(trip.payment_templates.all())
    default_subject, _ = render_trip_info(trip, payment_lines=[])
    subject = subject or default_subject

    sent = skipped = 0
    for child in recipients.values():
        if body_html:
            html = body_html
        else:
            lines = template_payment_lines(templates, birth_year=child.birth_date.year)
            _, html = render_trip_info(trip, payment_lines=lines)

        result = send_email(to=child.parent.email, subject=subject, html=html)
        if result.sent:
            sent += 1
        else:
            skipped += 1

    logger.info("Trip info e-mail for %s: sent=%s skipped=%s", trip.id, sent, skipped)
    return {'sent': sent, 'skipped': skipped}
