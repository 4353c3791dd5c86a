"""Participants app services layer."""

from .exceptions import (
    ParticipantsServiceError,
    ParticipantNotFoundError,
    NotParticipantOwnerError,
    InvalidGroupError,
    ActiveRegistrationsError,
)

from .participant_management import (
    UNCHANGED,
    list_participants_for_user,
    get_participant_for_user,
    create_participant,
    update_participant,
    delete_participants,
    assign_group,
    update_note,
    get_participant_registrations,
)


__all__ = [
    # Exceptions
    'ParticipantsServiceError',
    'ParticipantNotFoundError',
    'NotParticipantOwnerError',
    'InvalidGroupError',
    'ActiveRegistrationsError',

    # Participant Management
    'UNCHANGED',
    'list_participants_for_user',
    'get_participant_for_user',
    'create_participant',
    'update_participant',
    'delete_participants',
    'assign_group',
    'update_note',
    'get_participant_registrations',
]
