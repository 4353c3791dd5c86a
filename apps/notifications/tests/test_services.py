"""
Service layer unit tests for notifications app.

Tests cover:
- Bulk sending (dedup, batching)
- Recipient resolution
- Draft / approve / send flow and delivery logs
- Transactional templates and the Gmail API backend
"""

import base64
import json
import pytest
import httpx
from datetime import date
from email import message_from_bytes
from django.core import mail
from django.core.mail import EmailMessage

from apps.accounts.models import User
from apps.groups.models import ParticipantGroup
from apps.notifications.backends import GmailApiBackend, EmailDeliveryError, TOKEN_URL, SEND_URL
from apps.notifications.emails import fill_placeholders, render_email
from apps.notifications.mailer import send_bulk_emails, send_email
from apps.notifications.models import (
    EmailTemplate,
    NotificationLog,
    NotificationStatus,
    DeliveryStatus,
)
from apps.notifications.services import (
    resolve_recipients,
    create_notification,
    approve_notification,
    send_notification,
    delete_notification,
    reset_email_template,
    update_email_template,
    InvalidNotificationTargetError,
    InvalidNotificationStateError,
    UnsupportedChannelError,
    NoRecipientsError,
)
from apps.participants.models import Participant
from apps.trips.models import TripRegistration, RegistrationStatus


# =============================================================================
# Mailer
# =============================================================================

@pytest.mark.django_db
class TestMailer:

    def test_send_email_without_recipient(self):
        result = send_email(to='', subject='Hej', html='<p>x</p>')

        assert result.sent is False
        assert result.reason == 'no_recipient'
        assert mail.outbox == []

    def test_send_email_wraps_layout(self):
        result = send_email(to='parent@example.com', subject='Hej', html='<p>Treść</p>')

        assert result.sent is True
        message = mail.outbox[0]
        assert message.body == 'Treść'
        html, mimetype = message.alternatives[0]
        assert mimetype == 'text/html'
        assert '<p>Treść</p>' in html

    def test_bulk_dedups_and_batches(self):
        pauses = []
        recipients = ['a@x.pl', 'b@x.pl', 'a@x.pl', '', 'c@x.pl', 'd@x.pl', 'e@x.pl']

        results = send_bulk_emails(
            recipients=recipients,
            subject='Zbiórka',
            html='<p>Zbiórka o 7:00</p>',
            batch_size=2,
            delay=1.5,
            sleep=pauses.append,
        )

        assert [r['email'] for r in results] == ['a@x.pl', 'b@x.pl', 'c@x.pl', 'd@x.pl', 'e@x.pl']
        assert all(r['success'] for r in results)
        assert len(mail.outbox) == 5
        # three batches, no pause after the last
        assert pauses == [1.5, 1.5]

    def test_bulk_reports_failures(self, monkeypatch):
        def broken_send(self, fail_silently=False):
            raise ConnectionError('smtp down')

        monkeypatch.setattr('django.core.mail.EmailMultiAlternatives.send', broken_send)

        results = send_bulk_emails(recipients=['a@x.pl'], subject='S', html='h', sleep=lambda _: None)

        assert results == [{'email': 'a@x.pl', 'success': False, 'error': 'smtp down'}]

    def test_bulk_connection_refused(self, monkeypatch):
        def refuse(self):
            raise OSError('SMTP connection refused')

        monkeypatch.setattr('django.core.mail.backends.locmem.EmailBackend.open', refuse)

        results = send_bulk_emails(recipients=['a@x.pl', 'b@x.pl', 'a@x.pl'], subject='S', html='h')

        assert results == [
            {'email': 'a@x.pl', 'success': False, 'error': 'SMTP connection refused'},
            {'email': 'b@x.pl', 'success': False, 'error': 'SMTP connection refused'},
        ]
        assert mail.outbox == []


class TestPlaceholders:

    def test_unknown_placeholders_stay(self):
        assert fill_placeholders('{{a}} {{b}}', {'a': 1}) == '1 {{b}}'

    def test_escape(self):
        assert fill_placeholders('{{a}}', {'a': '<b>'}, escape=True) == '&lt;b&gt;'


# =============================================================================
# Notifications
# =============================================================================

@pytest.mark.django_db
class TestResolveRecipients:

    def test_all_active_parents(self, parent_user, other_parent, admin_user):
        User.objects.create_user(email='gone@example.com', password='TestPass123!', is_active=False)

        recipients = resolve_recipients(target_type='all')

        assert [u.email for u in recipients] == ['other@example.com', 'parent@example.com']

    def test_group_parents_once(self, parent_user, group, participant):
        sibling = Participant.objects.create(
            parent=parent_user, first_name='Staś', last_name='Kowalski', birth_date=date(2018, 1, 5),
        )
        ParticipantGroup.objects.create(participant=sibling, group=group)

        assert resolve_recipients(target_type='group', target_group=group) == [parent_user]

    def test_trip_parents_active_registrations_only(self, trip, participant, other_participant):
        TripRegistration.objects.create(trip=trip, participant=participant)
        TripRegistration.objects.create(
            trip=trip, participant=other_participant, status=RegistrationStatus.CANCELLED,
        )

        assert [u.email for u in resolve_recipients(target_type='trip', target_trip=trip)] == [
            'parent@example.com'
        ]


@pytest.mark.django_db
class TestNotificationFlow:

    def _draft(self, admin_user, **kwargs):
        defaults = {
            'created_by': admin_user,
            'subject': 'Zmiana godziny zbiórki',
            'body': 'Zbiórka przesunięta na 7:00.\nProsimy o punktualność.',
            'target_type': 'all',
        }
        defaults.update(kwargs)
        return create_notification(**defaults)

    def test_draft_counts_recipients(self, admin_user, parent_user, other_parent):
        notification = self._draft(admin_user)

        assert notification.status == NotificationStatus.DRAFT
        assert notification.recipient_count == 2

    def test_target_id_required(self, admin_user):
        with pytest.raises(InvalidNotificationTargetError):
            self._draft(admin_user, target_type='group')

    def test_send_requires_approval(self, admin_user, parent_user):
        notification = self._draft(admin_user)

        with pytest.raises(InvalidNotificationStateError):
            send_notification(notification_id=notification.id)

    def test_approve_and_send(self, admin_user, parent_user, other_parent):
        notification = self._draft(admin_user)
        approve_notification(notification_id=notification.id, approved_by=admin_user)

        result = send_notification(notification_id=notification.id)

        assert result == {'sent_count': 2, 'failed_count': 0}
        notification.refresh_from_db()
        assert notification.status == NotificationStatus.SENT
        assert notification.sent_at is not None
        logs = NotificationLog.objects.filter(notification=notification)
        assert {log.recipient_email for log in logs} == {'parent@example.com', 'other@example.com'}
        assert all(log.status == DeliveryStatus.SENT for log in logs)

    def test_send_with_unreachable_backend(self, admin_user, parent_user, monkeypatch):
        def refuse(self):
            raise OSError('SMTP connection refused')

        notification = self._draft(admin_user)
        approve_notification(notification_id=notification.id, approved_by=admin_user)
        monkeypatch.setattr('django.core.mail.backends.locmem.EmailBackend.open', refuse)

        result = send_notification(notification_id=notification.id)

        assert result == {'sent_count': 0, 'failed_count': 1}
        notification.refresh_from_db()
        assert notification.status == NotificationStatus.FAILED
        log = NotificationLog.objects.get(notification=notification)
        assert log.status == DeliveryStatus.FAILED
        assert log.error_message == 'SMTP connection refused'
        assert 'przesunięta na 7:00.<br>' in mail.outbox[0].alternatives[0][0]

    def test_approve_twice(self, admin_user):
        notification = self._draft(admin_user)
        approve_notification(notification_id=notification.id, approved_by=admin_user)

        with pytest.raises(InvalidNotificationStateError):
            approve_notification(notification_id=notification.id, approved_by=admin_user)

    def test_sms_not_supported(self, admin_user, parent_user):
        notification = self._draft(admin_user, channel='sms')
        approve_notification(notification_id=notification.id, approved_by=admin_user)

        with pytest.raises(UnsupportedChannelError):
            send_notification(notification_id=notification.id)

    def test_no_recipients(self, admin_user):
        notification = self._draft(admin_user)
        approve_notification(notification_id=notification.id, approved_by=admin_user)

        with pytest.raises(NoRecipientsError):
            send_notification(notification_id=notification.id)

    def test_only_drafts_deleted(self, admin_user):
        notification = self._draft(admin_user)
        approve_notification(notification_id=notification.id, approved_by=admin_user)

        with pytest.raises(InvalidNotificationStateError):
            delete_notification(notification_id=notification.id)


# =============================================================================
# Transactional templates
# =============================================================================

@pytest.mark.django_db
class TestEmailTemplates:

    def test_override_then_reset(self):
        update_email_template(key='welcome', subject='Cześć {{imie}}!')
        assert render_email('welcome', {'imie': 'Jan'})[0] == 'Cześć Jan!'

        reset_email_template(key='welcome')
        assert 'Witaj w BiegunSport' in render_email('welcome', {'imie': 'Jan'})[0]
        assert EmailTemplate.objects.filter(id='welcome').count() == 1


# =============================================================================
# Gmail API backend
# =============================================================================

def gmail_transport(captured, send_status=200, token_status=200):
    def handler(request):
        captured.append(request)
        if str(request.url) == TOKEN_URL:
            return httpx.Response(token_status, json={'access_token': 'access-123'})
        if str(request.url) == SEND_URL:
            return httpx.Response(send_status, json={'id': 'msg-1'})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


class TestGmailApiBackend:

    def test_sends_raw_message(self, gmail_settings):
        captured = []
        backend = GmailApiBackend(transport=gmail_transport(captured))
        message = EmailMessage('Zbiorka', 'Tresc', 'biuro@biegunsport.pl', ['parent@example.com'])

        assert backend.send_messages([message]) == 1

        token_request, send_request = captured
        assert b'grant_type=refresh_token' in token_request.content
        assert send_request.headers['Authorization'] == 'Bearer access-123'
        raw = json.loads(send_request.content)['raw']
        parsed = message_from_bytes(base64.urlsafe_b64decode(raw))
        assert parsed['To'] == 'parent@example.com'
        assert parsed['Subject'] == 'Zbiorka'
        assert backend.client is None

    def test_rejected_message_raises(self, gmail_settings):
        backend = GmailApiBackend(transport=gmail_transport([], send_status=400))
        message = EmailMessage('S', 'B', 'biuro@biegunsport.pl', ['parent@example.com'])

        with pytest.raises(EmailDeliveryError):
            backend.send_messages([message])

    def test_fail_silently_counts_nothing(self, gmail_settings):
        backend = GmailApiBackend(fail_silently=True, transport=gmail_transport([], send_status=500))
        message = EmailMessage('S', 'B', 'biuro@biegunsport.pl', ['parent@example.com'])

        assert backend.send_messages([message]) == 0

    def test_missing_credentials(self, settings):
        settings.GMAIL_REFRESH_TOKEN = ''
        backend = GmailApiBackend(transport=gmail_transport([]))

        with pytest.raises(EmailDeliveryError):
            backend.open()
        assert backend.client is None
