"""Domain-specific exceptions for participants services."""


class ParticipantsServiceError(Exception):
    """Base exception for participants services."""
    pass


class ParticipantNotFoundError(ParticipantsServiceError):
    """Raised when a child does not exist or is not visible to the user."""
    pass


class NotParticipantOwnerError(ParticipantsServiceError):
    """Raised when a parent acts on a child they do not own."""
    pass


class InvalidGroupError(ParticipantsServiceError):
    """Raised when a group does not exist or cannot be chosen by the user."""
    pass


class ActiveRegistrationsError(ParticipantsServiceError):
    """Raised when deleting children that still have active trip registrations."""
    pass
