import pytest
from django.core import mail
from django.urls import reverse
from rest_framework import status

from apps.notifications.emails import EMAIL_TEMPLATE_DEFAULTS
from apps.notifications.models import Notification, NotificationStatus


NOTIFICATION_DATA = {
    'subject': 'Zebranie rodziców',
    'body': 'Zapraszamy na zebranie w piątek o 18:00.',
    'target_type': 'group',
}


# =============================================================================
# Notification Tests
# =============================================================================

@pytest.mark.django_db
class TestNotificationApi:
    """Tests for /api/notifications/"""

    def test_create_group_notification(self, admin_client, group, participant, other_participant):
        """Draft for a group counts the parents."""
        data = {**NOTIFICATION_DATA, 'target_group_id': str(group.id)}
        response = admin_client.post(reverse('notifications:notification-list'), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == NotificationStatus.DRAFT
        assert response.data['recipient_count'] == 2
        assert response.data['target_group_name'] == 'Orliki'

    def test_group_target_requires_group(self, admin_client):
        """Group target needs a group id."""
        response = admin_client.post(reverse('notifications:notification-list'), NOTIFICATION_DATA, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'target_group_id' in response.data

    def test_unknown_group(self, admin_client):
        data = {**NOTIFICATION_DATA, 'target_group_id': '00000000-0000-0000-0000-000000000000'}
        response = admin_client.post(reverse('notifications:notification-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_full_flow(self, admin_client, group, participant):
        """Draft, approve, send and read the logs."""
        data = {**NOTIFICATION_DATA, 'target_group_id': str(group.id)}
        notification_id = admin_client.post(
            reverse('notifications:notification-list'), data, format='json'
        ).data['id']

        response = admin_client.post(reverse('notifications:notification-send', args=[notification_id]))
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        response = admin_client.post(reverse('notifications:notification-approve', args=[notification_id]))
        assert response.data['status'] == NotificationStatus.APPROVED

        response = admin_client.post(reverse('notifications:notification-send', args=[notification_id]))
        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'sent_count': 1, 'failed_count': 0}
        assert mail.outbox[-1].subject == 'Zebranie rodziców'

        response = admin_client.get(reverse('notifications:notification-logs', args=[notification_id]))
        assert [log['recipient_email'] for log in response.data] == ['parent@example.com']

        response = admin_client.get(reverse('notifications:notification-list'), {'status': 'sent'})
        assert response.data['count'] == 1

    def test_delete_draft(self, admin_client, admin_user):
        """Drafts can be deleted."""
        notification = Notification.objects.create(
            created_by=admin_user, subject='Test', body='Treść testowa', target_type='all',
        )

        response = admin_client.delete(reverse('notifications:notification-detail', args=[notification.id]))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Notification.objects.exists()

    def test_parent_forbidden(self, parent_client):
        """Notifications are admin only."""
        response = parent_client.get(reverse('notifications:notification-list'))

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# E-mail Template Tests
# =============================================================================

@pytest.mark.django_db
class TestEmailTemplateApi:
    """Tests for /api/notifications/email-templates/"""

    def test_list_creates_defaults(self, admin_client):
        """Listing creates the built-in templates."""
        response = admin_client.get(reverse('notifications:email-template-list'))

        assert response.status_code == status.HTTP_200_OK
        assert {row['id'] for row in response.data} == set(EMAIL_TEMPLATE_DEFAULTS)

    def test_update_and_reset(self, admin_client):
        """Reset restores the built-in subject."""
        url = reverse('notifications:email-template-detail', args=['payment_reminder'])
        response = admin_client.patch(url, {'subject': 'Pamiętaj o płatności'}, format='json')
        assert response.data['subject'] == 'Pamiętaj o płatności'

        response = admin_client.post(reverse('notifications:email-template-reset', args=['payment_reminder']))
        assert response.data['subject'] == EMAIL_TEMPLATE_DEFAULTS['payment_reminder']['subject']

    def test_unknown_key(self, admin_client):
        url = reverse('notifications:email-template-detail', args=['nope'])

        assert admin_client.get(url).status_code == status.HTTP_404_NOT_FOUND
