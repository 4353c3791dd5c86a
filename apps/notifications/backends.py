"""
Gmail API e-mail backend.

Sends messages through the Gmail REST API with an OAuth2 refresh token
instead of SMTP. Enable with:

    EMAIL_BACKEND = 'apps.notifications.backends.GmailApiBackend'

and set GMAIL_CLIENT_ID, GMAIL_CLIENT_SECRET and GMAIL_REFRESH_TOKEN.
"""

import base64
import logging

import httpx
from django.conf import settings
from django.core.mail.backends.base import BaseEmailBackend

logger = logging.getLogger(__name__)

TOKEN_URL = 'https://oauth2.googleapis.com/token'
SEND_URL = 'https://gmail.googleapis.com/gmail/v1/users/me/messages/send'
REQUEST_TIMEOUT = 30.0


class EmailDeliveryError(Exception):
    """Raised when the Gmail API refuses a token refresh or a message."""
    pass


class GmailApiBackend(BaseEmailBackend):
    """Django e-mail backend posting raw MIME messages to the Gmail API."""

    def __init__(self, fail_silently=False, transport=None, **kwargs):
        super().__init__(fail_silently=fail_silently, **kwargs)
        self.transport = transport
        self.client = None
        self.access_token = None

    def open(self):
        if self.client is not None:
            return False
        self.client = httpx.Client(timeout=REQUEST_TIMEOUT, transport=self.transport)
        try:
            self.access_token = self._refresh_access_token()
        except EmailDeliveryError:
            self.close()
            if not self.fail_silently:
                raise
            return False
        return True

    def close(self):
        if self.client is not None:
            self.client.close()
        self.client = None
        self.access_token = None

    def _refresh_access_token(self):
        if not (settings.GMAIL_CLIENT_ID and settings.GMAIL_CLIENT_SECRET and settings.GMAIL_REFRESH_TOKEN):
            raise EmailDeliveryError("Gmail OAuth2 credentials are not configured")

        response = self.client.post(TOKEN_URL, data={
            'client_id': settings.GMAIL_CLIENT_ID,
            'client_secret': settings.GMAIL_CLIENT_SECRET,
            'refresh_token': settings.GMAIL_REFRESH_TOKEN,
            'grant_type': 'refresh_token',
        })
        if response.is_error:
            raise EmailDeliveryError(f"Token refresh failed with status {response.status_code}")

        token = response.json().get('access_token')
        if not token:
            raise EmailDeliveryError("Token refresh returned no access token")
        return token

    def _send(self, message):
        raw = base64.urlsafe_b64encode(message.message().as_bytes()).decode('ascii')
        response = self.client.post(
            SEND_URL,
            json={'raw': raw},
            headers={'Authorization': f'Bearer {self.access_token}'},
        )
        if response.is_error:
            raise EmailDeliveryError(f"Gmail API rejected message with status {response.status_code}")

    def send_messages(self, email_messages):
        if not email_messages:
            return 0

        new_connection = self.open()
        if self.client is None:
            return 0

        sent = 0
        try:
            for message in email_messages:
                if not message.recipients():
                    continue
                try:
                    self._send(message)
                except (httpx.HTTPError, EmailDeliveryError):
                    if not self.fail_silently:
                        raise
                    logger.warning("Gmail API send failed for %s", message.recipients())
                    continue
                sent += 1
        finally:
            if new_connection:
                self.close()
        return sent
