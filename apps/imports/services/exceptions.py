"""
Domain-specific exceptions for imports app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class ImportsServiceError(Exception):
    """Base exception for all imports service errors."""
    pass


class InvalidCSVError(ImportsServiceError):
    """Raised when an uploaded CSV cannot be staged."""
    pass


class ImportRowError(ImportsServiceError):
    """
    Raised for a single staging row that cannot be imported.

    The message is stored on the row, so it is written for the admin.
    """
    pass
