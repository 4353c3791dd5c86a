import pytest
from django.urls import reverse
from rest_framework import status
from apps.groups.models import Group, ParticipantGroup


# =============================================================================
# Group List Tests
# =============================================================================

@pytest.mark.django_db
class TestGroupList:
    """Tests for GET /api/groups/"""

    def test_admin_sees_all_groups(self, admin_client, group, hidden_group):
        """Admin sees every group in display order."""
        response = admin_client.get(reverse('groups:group-list'))

        assert response.status_code == status.HTTP_200_OK
        names = [row['name'] for row in response.data['results']]
        assert names == ['Orliki', 'Kadra']

    def test_parent_sees_selectable_groups_only(self, parent_client, group, hidden_group):
        """Parents only see groups open for selection."""
        response = parent_client.get(reverse('groups:group-list'))

        assert response.status_code == status.HTTP_200_OK
        names = [row['name'] for row in response.data['results']]
        assert names == ['Orliki']

    def test_participants_count(self, admin_client, participant, other_participant):
        """List carries the number of children per group."""
        response = admin_client.get(reverse('groups:group-list'))

        assert response.data['results'][0]['participants_count'] == 2

    def test_list_groups_unauthenticated(self, api_client):
        """List requires authentication."""
        response = api_client.get(reverse('groups:group-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Group Create Tests
# =============================================================================

@pytest.mark.django_db
class TestGroupCreate:
    """Tests for POST /api/groups/"""

    def test_create_group_appends_to_display_order(self, admin_client, group, hidden_group):
        """New group goes to the end of the order."""
        response = admin_client.post(reverse('groups:group-list'), {'name': '  Żaki  '})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'Żaki'
        assert response.data['display_order'] == 3
        assert response.data['is_selectable_by_parent'] is True

    def test_create_duplicate_name_case_insensitive(self, admin_client, group):
        """Group names are unique regardless of case."""
        response = admin_client.post(reverse('groups:group-list'), {'name': 'ORLIKI'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Group.objects.count() == 1

    def test_create_blank_name(self, admin_client):
        """Blank name is rejected."""
        response = admin_client.post(reverse('groups:group-list'), {'name': '   '})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_parent_cannot_create_group(self, parent_client):
        """Only admins can create groups."""
        response = parent_client.post(reverse('groups:group-list'), {'name': 'Żaki'})

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Group Update Tests
# =============================================================================

@pytest.mark.django_db
class TestGroupUpdate:
    """Tests for PATCH /api/groups/{id}/ and POST /api/groups/{id}/rename/"""

    def test_update_group(self, admin_client, group):
        """Update the description and the selectable flag."""
        url = reverse('groups:group-detail', args=[group.id])
        response = admin_client.patch(url, {'description': 'Dzieci 6-8 lat', 'is_selectable_by_parent': False})

        assert response.status_code == status.HTTP_200_OK
        group.refresh_from_db()
        assert group.description == 'Dzieci 6-8 lat'
        assert group.is_selectable_by_parent is False

    def test_rename_group(self, admin_client, group):
        """Rename keeps the group id."""
        url = reverse('groups:group-rename', args=[group.id])
        response = admin_client.post(url, {'name': 'Orły'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['name'] == 'Orły'

    def test_rename_to_taken_name(self, admin_client, group, hidden_group):
        """Rename to an existing name fails."""
        url = reverse('groups:group-rename', args=[group.id])
        response = admin_client.post(url, {'name': 'kadra'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_rename_missing_group(self, admin_client):
        """Unknown group returns 404."""
        url = reverse('groups:group-rename', args=['00000000-0000-0000-0000-000000000000'])
        response = admin_client.post(url, {'name': 'Orły'})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_parent_cannot_update_group(self, parent_client, group):
        """Only admins can update groups."""
        url = reverse('groups:group-detail', args=[group.id])
        response = parent_client.patch(url, {'description': 'x'})

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Group Delete Tests
# =============================================================================

@pytest.mark.django_db
class TestGroupDelete:
    """Tests for DELETE /api/groups/{id}/"""

    def test_delete_group_keeps_children_and_trips(self, admin_client, group, participant, trip):
        """Deleting a group detaches children and trips."""
        url = reverse('groups:group-detail', args=[group.id])
        response = admin_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Group.objects.filter(id=group.id).exists()
        assert not ParticipantGroup.objects.filter(participant=participant).exists()
        participant.refresh_from_db()
        trip.refresh_from_db()
        assert trip.trip_groups.count() == 0


# =============================================================================
# Group Participants Tests
# =============================================================================

@pytest.mark.django_db
class TestGroupParticipants:
    """Tests for GET /api/groups/{id}/participants/"""

    def test_lists_children_with_parent_contacts(self, admin_client, group, participant):
        """Children come with their parent's contacts."""
        url = reverse('groups:group-participants', args=[group.id])
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['first_name'] == 'Zosia'
        assert response.data[0]['parent_email'] == 'parent@example.com'
        assert response.data[0]['parent_phone'] == '600100200'

    def test_parent_forbidden(self, parent_client, group):
        url = reverse('groups:group-participants', args=[group.id])
        response = parent_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN
