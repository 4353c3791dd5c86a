"""
Domain-specific exceptions for trips app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""


class TripsServiceError(Exception):
    """Base exception for all trips service errors."""
    pass


class TripNotFoundError(TripsServiceError):
    """Raised when a trip does not exist or is not visible to the user."""
    pass


class RegistrationNotFoundError(TripsServiceError):
    """Raised when a trip registration does not exist."""
    pass


class ParticipantAccessError(TripsServiceError):
    """Raised when a parent acts on a child they do not own."""
    pass


class AlreadyRegisteredError(TripsServiceError):
    """Raised when a child already has an active registration on the trip."""
    pass


class OutsideGroupError(TripsServiceError):
    """Raised when a parent registers a child whose group is not on the trip."""
    pass


class TripNotOpenError(TripsServiceError):
    """Raised when a parent acts on a trip that is not published."""
    pass


class TripEmailError(TripsServiceError):
    """Raised when a trip info e-mail has nobody to go to."""
    pass


class TripParserError(TripsServiceError):
    """Base exception for AI trip description parsing."""
    pass


class InvalidTripDescriptionError(TripParserError):
    """Raised when the description is too short to parse."""
    pass


class TripParserConfigurationError(TripParserError):
    """Raised when the AI API key is not configured."""
    pass


class TripParserRateLimitError(TripParserError):
    """Raised when the AI provider rate-limits the request."""
    pass


class TripParserUpstreamError(TripParserError):
    """Raised when the AI provider fails or returns an unusable answer."""
    pass
