"""Meeting lifecycle engine: scheduling, decisions, cancellation, queries."""

from viewings.scheduling.dates import parse_scheduled_at
from viewings.scheduling.schemas import TransitionResult
from viewings.scheduling.service import MeetingService

__all__ = [
    "MeetingService",
    "TransitionResult",
    "parse_scheduled_at",
]
