"""Error taxonomy for the meeting lifecycle.

Every error carries a human readable message and, for input problems,
the name of the offending field. The HTTP layer maps each class to a
status code; nothing below the API knows about HTTP.
"""


class MeetingError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(MeetingError):
    """Malformed or missing input, bad status value, past-dated scheduling."""

    status_code = 400


class AuthError(MeetingError):
    """Caller could not be authenticated."""

    status_code = 401


class ForbiddenError(MeetingError):
    """Caller lacks ownership or role for the requested mutation."""

    status_code = 403


class NotFoundError(MeetingError):
    """Referenced meeting, property or user does not exist."""

    status_code = 404


class ConflictError(MeetingError):
    """Requester already has an active meeting inside the conflict window."""

    status_code = 409


class NotificationError(MeetingError):
    """Notifier failed. Never propagated as an operation failure."""

    status_code = 502


class StoreError(MeetingError):
    """Persistence layer failure; fatal to the calling operation."""

    status_code = 500
