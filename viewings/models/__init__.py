"""Domain models for the property viewing scheduler."""

from viewings.models.base import BaseEntity, utcnow
from viewings.models.identity import Identity, Role
from viewings.models.meeting import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    Meeting,
    MeetingStatus,
    MeetingWithProperty,
    ViewingSlot,
)
from viewings.models.property import PropertyRecord, PropertySummary

__all__ = [
    "ACTIVE_STATUSES",
    "BaseEntity",
    "Identity",
    "Meeting",
    "MeetingStatus",
    "MeetingWithProperty",
    "PropertyRecord",
    "PropertySummary",
    "Role",
    "TERMINAL_STATUSES",
    "ViewingSlot",
    "utcnow",
]
