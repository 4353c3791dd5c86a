"""
Service layer unit tests for groups app.

Tests cover:
- Display order and name uniqueness
- Visibility for parents
- Error handling
"""

import pytest
from uuid import uuid4

from apps.groups.models import Group
from apps.groups.services import (
    create_group,
    get_group_by_id,
    update_group,
    delete_group,
    list_groups_for_user,
    get_group_participants,
)
from apps.groups.services.exceptions import (
    GroupNotFoundError,
    DuplicateGroupNameError,
)


@pytest.mark.django_db
class TestCreateGroup:

    def test_first_group_gets_order_one(self):
        group = create_group(name='Żaki')

        assert group.display_order == 1

    def test_next_group_goes_last(self, group, hidden_group):
        created = create_group(name='Juniorzy', description='13+')

        assert created.display_order == hidden_group.display_order + 1
        assert created.description == '13+'

    def test_duplicate_name_raises(self, group):
        with pytest.raises(DuplicateGroupNameError):
            create_group(name=' orliki ')


@pytest.mark.django_db
class TestUpdateGroup:

    def test_rename_through_update(self, group):
        updated = update_group(group_id=group.id, name='Orły', display_order=7)

        assert updated.name == 'Orły'
        assert updated.display_order == 7

    def test_keeping_own_name_is_allowed(self, group):
        updated = update_group(group_id=group.id, name='Orliki')

        assert updated.name == 'Orliki'

    def test_missing_group(self):
        with pytest.raises(GroupNotFoundError):
            update_group(group_id=uuid4(), description='x')


@pytest.mark.django_db
class TestGroupQueries:

    def test_get_group_by_id_missing(self):
        with pytest.raises(GroupNotFoundError):
            get_group_by_id(group_id=uuid4())

    def test_parent_visibility(self, parent_user, admin_user, group, hidden_group):
        assert list(list_groups_for_user(user=parent_user)) == [group]
        assert list(list_groups_for_user(user=admin_user)) == [group, hidden_group]

    def test_group_participants_sorted_by_last_name(self, group, participant, other_participant):
        names = [child.last_name for child in get_group_participants(group_id=group.id)]

        assert names == ['Kowalska', 'Nowak']

    def test_delete_group(self, group, participant):
        delete_group(group_id=group.id)

        assert not Group.objects.exists()
        participant.refresh_from_db()
        assert participant.group is None
