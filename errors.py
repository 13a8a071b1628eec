"""Errors raised while processing relay traffic.

Every error carries the message that is sent back to the originating
connection as ``{"error": message}``.
"""

from typing import Optional

from constants import (
    ERROR_ALREADY_SUBSCRIBED,
    ERROR_PARTY_MISMATCH,
    ERROR_PROCESSING_MESSAGE,
)


class RelayError(Exception):
    default_message = ERROR_PROCESSING_MESSAGE

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ProtocolError(RelayError):
    """Payload could not be parsed or names an unknown action."""


class InvalidFieldsError(RelayError):
    """A required field is missing or empty."""


class ConflictError(RelayError):
    default_message = ERROR_ALREADY_SUBSCRIBED


class AlreadyBoundError(ConflictError):
    pass


class AlreadyInRoomError(ConflictError):
    pass


class NotFoundError(RelayError, LookupError):
    """Unknown room, unknown recipient, or a party outside the stated room."""


class IdentityMismatchError(RelayError):
    default_message = ERROR_PARTY_MISMATCH