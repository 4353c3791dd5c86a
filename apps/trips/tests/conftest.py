import pytest


@pytest.fixture
def gemini_settings(settings):
    """Gemini key and an endpoint served by the mock transport."""
    settings.GEMINI_API_KEY = 'test-key'
    settings.GEMINI_MODEL = 'gemini-2.0-flash'
    settings.GEMINI_API_URL = 'https://gemini.test/v1beta/models'
    return settings
