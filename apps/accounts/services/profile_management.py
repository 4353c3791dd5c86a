"""Profile maintenance service."""

from django.db import transaction
from django.db.models import Count, QuerySet
from django.contrib.auth import get_user_model

User = get_user_model()

PROFILE_FIELDS = (
    'first_name',
    'last_name',
    'phone',
    'secondary_email',
    'secondary_phone',
    'address_street',
    'address_zip',
    'address_city',
    'pesel',
)


@transaction.atomic
def update_profile(*, user: User, **changes) -> User:
    """
    Update the editable profile fields of a user.

    Unknown keys are ignored. Empty strings clear optional fields.
    """
    updated = []
    for field in PROFILE_FIELDS:
        if field in changes:
            value = changes[field]
            setattr(user, field, (value or '').strip())
            updated.append(field)

    if updated:
        user.save(update_fields=updated + ['updated_at'])
    return user


def list_parents() -> QuerySet:
    """Active parents with the number of children they own."""
    return (
        User.objects.parents()
        .annotate(children_count=Count('participants'))
        .order_by('last_name', 'first_name', 'email')
    )
