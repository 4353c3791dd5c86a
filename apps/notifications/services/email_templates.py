"""
Admin editing of transactional e-mail templates.

Templates are created from the built-in defaults the first time they are
listed or opened.
"""

import logging
from typing import List, Optional

from django.db import transaction

from apps.notifications.emails import EMAIL_TEMPLATE_DEFAULTS
from apps.notifications.models import EmailTemplate

from .exceptions import EmailTemplateNotFoundError

logger = logging.getLogger(__name__)


def _ensure_defaults() -> None:
    existing = set(EmailTemplate.objects.values_list('id', flat=True))
    missing = [
        EmailTemplate(id=key, **default)
        for key, default in EMAIL_TEMPLATE_DEFAULTS.items()
        if key not in existing
    ]
    if missing:
        EmailTemplate.objects.bulk_create(missing, ignore_conflicts=True)


def list_email_templates() -> List[EmailTemplate]:
    _ensure_defaults()
    return list(EmailTemplate.objects.order_by('id'))


def get_email_template(*, key: str) -> EmailTemplate:
    """
    Raises:
        EmailTemplateNotFoundError: If the key is neither stored nor built in
    """
    template = EmailTemplate.objects.filter(id=key).first()
    if template is not None:
        return template
    if key not in EMAIL_TEMPLATE_DEFAULTS:
        raise EmailTemplateNotFoundError(f"E-mail template '{key}' not found")
    return EmailTemplate.objects.create(id=key, **EMAIL_TEMPLATE_DEFAULTS[key])


@transaction.atomic
def update_email_template(
    *,
    key: str,
    subject: Optional[str] = None,
    body_html: Optional[str] = None,
    name: Optional[str] = None,
) -> EmailTemplate:
    template = get_email_template(key=key)
    if subject is not None:
        template.subject = subject
    if body_html is not None:
        template.body_html = body_html
    if name is not None:
        template.name = name
    template.save()
    logger.info("Updated e-mail template %s", key)
    return template


@transaction.atomic
def reset_email_template(*, key: str) -> EmailTemplate:
    """Restore the built-in subject and body of a template."""
    if key not in EMAIL_TEMPLATE_DEFAULTS:
        raise EmailTemplateNotFoundError(f"E-mail template '{key}' has no default")
    template, _ = EmailTemplate.objects.update_or_create(
        id=key, defaults=EMAIL_TEMPLATE_DEFAULTS[key],
    )
    return template
