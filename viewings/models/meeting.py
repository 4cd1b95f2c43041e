"""Meeting model: a property viewing request and its decision state."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from viewings.models.base import BaseEntity
from viewings.models.property import PropertySummary


class MeetingStatus(str, Enum):
    """Lifecycle states of a meeting request."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: "str | MeetingStatus") -> "MeetingStatus | None":
        """Return the matching status or None for unknown values."""
        try:
            return cls(value)
        except ValueError:
            return None


# Active meetings hold a slot in the requester's calendar
ACTIVE_STATUSES = frozenset({MeetingStatus.PENDING, MeetingStatus.ACCEPTED})
TERMINAL_STATUSES = frozenset({MeetingStatus.REJECTED, MeetingStatus.CANCELLED})


class Meeting(BaseEntity):
    """A viewing appointment requested by a client for one property.

    property_title and the requester contact fields are snapshots taken at
    creation time. They are never re-synced with the property directory or
    the identity provider, so historic meetings keep what was communicated.
    """

    property_id: str = Field(min_length=1, description="Referenced property")
    property_title: str = Field(description="Property title when the request was made")
    requester_id: str | None = Field(
        default=None,
        description="Account that created the meeting (unset for legacy entries)",
    )
    requester_name: str
    requester_email: str
    requester_phone: str
    scheduled_at: datetime = Field(description="Proposed viewing time (UTC)")
    notes: str = ""
    status: MeetingStatus = MeetingStatus.PENDING
    admin_response: str = ""
    responded_at: datetime | None = Field(
        default=None,
        description="Time of the last admin decision; None while pending",
    )

    @field_validator("requester_email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class MeetingWithProperty(Meeting):
    """Meeting enriched with the current property card for requester views."""

    property_summary: PropertySummary | None = None


class ViewingSlot(BaseModel):
    """Booked time of a property, without requester details."""

    id: UUID
    property_id: str
    scheduled_at: datetime

    @classmethod
    def from_meeting(cls, meeting: Meeting) -> "ViewingSlot":
        return cls(
            id=meeting.id,
            property_id=meeting.property_id,
            scheduled_at=meeting.scheduled_at,
        )
