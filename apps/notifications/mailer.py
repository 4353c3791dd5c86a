"""
Outbound e-mail for the club.

Every message is wrapped in the club layout and sent through Django's
configured e-mail backend (SMTP or the Gmail API backend) with a plain
text alternative.

Usage:
    from apps.notifications.mailer import send_email, send_bulk_emails

    result = send_email(to='parent@example.com', subject='Hello', html='<p>Hi</p>')
    if not result.sent:
        print(result.reason)

    results = send_bulk_emails(recipients=emails, subject='News', html=body)
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.template.loader import render_to_string
from django.utils.html import strip_tags

logger = logging.getLogger(__name__)


@dataclass
class EmailResult:
    """Result of an email send attempt.

    Attributes:
        sent: Whether the email was handed to the backend
        reason: Reason for failure if sent is False
    """

    sent: bool
    reason: Optional[str] = None


def wrap_in_layout(content_html: str) -> str:
    """Put message content into the club's base HTML layout."""
    return render_to_string('emails/base.html', {
        'content': content_html,
        'club_name': settings.CLUB_NAME,
        'contact_email': settings.CLUB_CONTACT_EMAIL,
    })


def _build_message(to: str, subject: str, html: str, connection=None) -> EmailMultiAlternatives:
    document = wrap_in_layout(html)
    message = EmailMultiAlternatives(
        subject=subject,
        body=strip_tags(html).strip(),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to],
        connection=connection,
    )
    message.attach_alternative(document, 'text/html')
    return message


def send_email(*, to: str, subject: str, html: str, connection=None) -> EmailResult:
    """
    Send a single e-mail.

    Backend failures are logged and reported in the result.

    Args:
        to: Recipient address
        subject: Subject line
        html: Message content (wrapped in the club layout)
        connection: Optional open backend connection

    Returns:
        EmailResult
    """
    if not to:
        return EmailResult(sent=False, reason='no_recipient')

    try:
        _build_message(to, subject, html, connection=connection).send()
    except Exception as e:
        logger.exception("Failed to send email to=%s subject=%s", to, subject)
        return EmailResult(sent=False, reason=str(e))

    logger.info("Email sent to=%s subject=%s", to, subject)
    return EmailResult(sent=True)


def send_bulk_emails(
    *,
    recipients: Iterable[str],
    subject: str,
    html: str,
    batch_size: Optional[int] = None,
    delay: Optional[float] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> List[Dict[str, object]]:
    """
    Send the same message to many recipients.

    Duplicate addresses are sent once. Messages go out in batches over a
    shared connection with a pause between batches (none after the last).
    When the connection cannot be opened every recipient is reported as
    failed.

    Args:
        recipients: Addresses to send to
        subject: Subject line
        html: Message content
        batch_size: Messages per batch (defaults to NOTIFICATION_BATCH_SIZE)
        delay: Seconds between batches (defaults to NOTIFICATION_BATCH_DELAY_SECONDS)
        sleep: Pause function

    Returns:
        One {'email', 'success', 'error'} dict per unique recipient
    """
    batch_size = batch_size or settings.NOTIFICATION_BATCH_SIZE
    if delay is None:
        delay = settings.NOTIFICATION_BATCH_DELAY_SECONDS

    unique = list(dict.fromkeys(email for email in recipients if email))
    results = []

    connection = get_connection()
    try:
        connection.open()
    except Exception as e:
        logger.exception("Could not open mail connection for bulk email '%s'", subject)
        return [{'email': email, 'success': False, 'error': str(e)} for email in unique]

    try:
        for start in range(0, len(unique), batch_size):
            for email in unique[start:start + batch_size]:
                result = send_email(to=email, subject=subject, html=html, connection=connection)
                results.append({
                    'email': email,
                    'success': result.sent,
                    'error': result.reason,
                })

            if start + batch_size < len(unique):
                sleep(delay)
    finally:
        connection.close()

    failed = sum(1 for r in results if not r['success'])
    logger.info("Bulk email '%s': %s sent, %s failed", subject, len(results) - failed, failed)
    return results
