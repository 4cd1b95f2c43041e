"""Meetings API endpoints for viewing requests and admin decisions."""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from viewings.api.deps import get_current_user, get_meeting_service, require_admin
from viewings.models.identity import Identity
from viewings.models.meeting import Meeting, MeetingStatus, MeetingWithProperty, ViewingSlot
from viewings.models.queries import MeetingPage, MeetingStats
from viewings.scheduling.service import MeetingService

router = APIRouter(prefix="/meetings", tags=["meetings"])


class CreateMeetingRequest(BaseModel):
    """Request body for a new viewing request.

    Fields are optional at the schema level so that missing values are
    reported by the lifecycle engine with its own messages.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    property_id: str | None = Field(default=None, description="Property to visit")
    phone: str | None = Field(default=None, description="Contact phone for this request")
    scheduled_at: str | datetime | None = Field(
        default=None, description="Requested viewing time"
    )
    notes: str | None = Field(default=None, description="Optional message to the agency")


class StatusUpdateRequest(BaseModel):
    """Request body for an admin decision."""

    model_config = ConfigDict(str_strip_whitespace=True)

    status: str = Field(description="pending, accepted, rejected or cancelled")
    admin_response: str | None = Field(default=None, description="Note to the requester")


class RescheduleRequest(BaseModel):
    """Request body for moving a meeting."""

    scheduled_at: str | datetime | None = Field(
        default=None, description="New viewing time"
    )


class MeetingCreatedResponse(BaseModel):
    """Response for a created meeting."""

    meeting: Meeting
    message: str


class StatusUpdateResponse(BaseModel):
    """Response for an admin decision."""

    meeting: Meeting
    notification_sent: bool
    message: str


class MessageResponse(BaseModel):
    """Generic acknowledgement."""

    success: bool = True
    message: str


def _decision_message(status: MeetingStatus, notification_sent: bool) -> str:
    if status in (MeetingStatus.ACCEPTED, MeetingStatus.REJECTED):
        outcome = "Email sent to user." if notification_sent else "Email failed to send."
        return f"Meeting {status.value}. {outcome}"
    return f"Meeting status updated to {status.value}"


@router.post("", response_model=MeetingCreatedResponse, status_code=201)
async def create_meeting(
    body: CreateMeetingRequest,
    user: Identity = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingCreatedResponse:
    """Request a property viewing.

    Contact name and email come from the caller's account, never from the
    request body, so replies reach the account holder.
    """
    meeting = await service.create(
        property_id=body.property_id,
        requester=user,
        phone=body.phone,
        scheduled_at=body.scheduled_at,
        notes=body.notes,
    )
    return MeetingCreatedResponse(
        meeting=meeting,
        message="Meeting request submitted successfully. "
        "You will receive notifications at your registered email.",
    )


@router.get("/my-meetings", response_model=list[MeetingWithProperty])
async def list_my_meetings(
    user: Identity = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
) -> list[MeetingWithProperty]:
    """Meetings requested by the caller, newest first."""
    return await service.list_for_requester(user.id)


@router.get("/admin/all", response_model=MeetingPage)
async def list_all_meetings(
    status: str = Query(default="all", description="Status filter or 'all'"),
    search: str | None = Query(default=None, description="Requester or property text"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="limit"),
    sort_by: str = Query(default="created_at", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query(default="desc", alias="sortOrder"),
    _admin: Identity = Depends(require_admin),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingPage:
    """Admin list with status filter, text search, sorting and pagination."""
    return await service.list_for_admin(
        status=status,
        search=search,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/admin/stats", response_model=MeetingStats)
async def get_meeting_stats(
    _admin: Identity = Depends(require_admin),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingStats:
    """Dashboard counts."""
    return await service.stats()


@router.get("/property/{property_id}", response_model=list[ViewingSlot])
async def list_upcoming_for_property(
    property_id: str,
    service: MeetingService = Depends(get_meeting_service),
) -> list[ViewingSlot]:
    """Upcoming accepted viewings of a property (public availability).

    Only slot times are exposed; requester contact details stay private.
    """
    meetings = await service.list_upcoming_for_property(property_id)
    return [ViewingSlot.from_meeting(m) for m in meetings]


@router.patch("/{meeting_id}/status", response_model=StatusUpdateResponse)
async def set_meeting_status(
    meeting_id: str,
    body: StatusUpdateRequest,
    admin: Identity = Depends(require_admin),
    service: MeetingService = Depends(get_meeting_service),
) -> StatusUpdateResponse:
    """Accept, reject or otherwise set a meeting's status."""
    result = await service.transition(
        meeting_id, body.status, caller=admin, admin_response=body.admin_response
    )
    return StatusUpdateResponse(
        meeting=result.meeting,
        notification_sent=result.notification_sent,
        message=_decision_message(result.meeting.status, result.notification_sent),
    )


@router.delete("/{meeting_id}", response_model=MessageResponse)
async def cancel_meeting(
    meeting_id: str,
    user: Identity = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
) -> MessageResponse:
    """Cancel a meeting (requester or admin)."""
    await service.cancel(meeting_id, caller=user)
    return MessageResponse(message="Meeting cancelled successfully")


@router.patch("/{meeting_id}/reschedule", response_model=MeetingCreatedResponse)
async def reschedule_meeting(
    meeting_id: str,
    body: RescheduleRequest,
    user: Identity = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
) -> MeetingCreatedResponse:
    """Move a meeting to a new time; it returns to pending."""
    meeting = await service.reschedule(meeting_id, caller=user, new_scheduled_at=body.scheduled_at)
    return MeetingCreatedResponse(
        meeting=meeting,
        message="Meeting rescheduled successfully. Waiting for admin approval.",
    )
