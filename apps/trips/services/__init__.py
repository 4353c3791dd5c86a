"""
Trips services.

Usage:
    from apps.trips.services import create_trip, register_participant
"""

from .exceptions import (
    TripsServiceError,
    TripNotFoundError,
    RegistrationNotFoundError,
    ParticipantAccessError,
    AlreadyRegisteredError,
    OutsideGroupError,
    TripNotOpenError,
    TripEmailError,
    TripParserError,
    InvalidTripDescriptionError,
    TripParserConfigurationError,
    TripParserRateLimitError,
    TripParserUpstreamError,
)
from .trip_management import (
    get_trip_by_id,
    list_trips_for_user,
    create_trip,
    update_trip,
    set_trip_status,
    delete_trip,
    duplicate_trip,
    get_trips_for_parent,
)
from .registration_management import (
    register_participant,
    cancel_registration,
    set_participation_status,
    get_trip_participants,
)
from .trip_emails import (
    get_trip_email_preview,
    send_trip_info_email,
)
from .trip_parsing import (
    parse_trip_description,
)

__all__ = [
    # Exceptions
    'TripsServiceError',
    'TripNotFoundError',
    'RegistrationNotFoundError',
    'ParticipantAccessError',
    'AlreadyRegisteredError',
    'OutsideGroupError',
    'TripNotOpenError',
    'TripEmailError',
    'TripParserError',
    'InvalidTripDescriptionError',
    'TripParserConfigurationError',
    'TripParserRateLimitError',
    'TripParserUpstreamError',
    # Trips
    'get_trip_by_id',
    'list_trips_for_user',
    'create_trip',
    'update_trip',
    'set_trip_status',
    'delete_trip',
    'duplicate_trip',
    'get_trips_for_parent',
    # Registrations
    'register_participant',
    'cancel_registration',
    'set_participation_status',
    'get_trip_participants',
    # E-mails
    'get_trip_email_preview',
    'send_trip_info_email',
    # AI parsing
    'parse_trip_description',
]
