import pytest


@pytest.fixture
def gmail_settings(settings):
    """OAuth2 credentials for the Gmail API backend."""
    settings.GMAIL_CLIENT_ID = 'client'
    settings.GMAIL_CLIENT_SECRET = 'secret'
    settings.GMAIL_REFRESH_TOKEN = 'refresh'
    return settings
