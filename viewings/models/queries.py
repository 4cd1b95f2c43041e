"""Read-side schemas for the admin list and statistics queries."""

from pydantic import BaseModel, Field

from viewings.models.meeting import Meeting, MeetingStatus


class MeetingFilter(BaseModel):
    """Filter criteria for the admin meeting list."""

    status: MeetingStatus | None = Field(
        default=None, description="Exact status match; None means any status"
    )
    search: str | None = Field(
        default=None,
        description="Case-insensitive substring over requester name, email, "
        "phone and property title",
    )


class MeetingPage(BaseModel):
    """One page of the admin meeting list."""

    items: list[Meeting]
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    page_size: int = Field(ge=1)
    total_pages: int = Field(ge=0)


class MeetingStats(BaseModel):
    """Aggregate counts for the admin dashboard."""

    total: int = 0
    pending: int = 0
    accepted: int = 0
    rejected: int = 0
    cancelled: int = 0
    created_today: int = 0
    upcoming_accepted: int = 0
    accepted_tomorrow: int = 0
