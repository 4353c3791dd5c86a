"""
Groups app services layer.

Services contain business logic and orchestrate operations across models.
All state-changing operations use transactions and concurrency protection.
"""

from .exceptions import (
    GroupsServiceError,
    GroupNotFoundError,
    DuplicateGroupNameError,
)

from .group_management import (
    create_group,
    rename_group,
    update_group,
    delete_group,
    get_group_by_id,
    list_groups_for_user,
    get_group_participants,
)


__all__ = [
    # Exceptions
    'GroupsServiceError',
    'GroupNotFoundError',
    'DuplicateGroupNameError',

    # Group Management
    'create_group',
    'rename_group',
    'update_group',
    'delete_group',
    'get_group_by_id',
    'list_groups_for_user',
    'get_group_participants',
]
