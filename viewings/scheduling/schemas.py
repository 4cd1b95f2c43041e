"""Results returned by lifecycle operations."""

from pydantic import BaseModel, Field

from viewings.models.meeting import Meeting


class TransitionResult(BaseModel):
    """Outcome of an admin status decision.

    notification_sent is advisory: a failed email never fails the
    transition, the caller only learns that delivery did not happen.
    """

    meeting: Meeting
    notification_sent: bool = Field(
        default=False, description="Whether the requester email was delivered"
    )
