"""Meeting lifecycle engine and query surface.

Lifecycle:
    create      -> pending (conflict-checked, admins notified)
    transition  -> any status by an admin (requester notified on accept/reject)
    cancel      -> cancelled by requester or admin (future, non-terminal only)
    reschedule  -> pending again at a new time (requester only, admins notified)

Validation and authorization happen before any write. Notifications are
sent only after the write has returned and never change its outcome.
"""

import math
from collections.abc import Callable
from datetime import datetime, time, timedelta
from zoneinfo import ZoneInfo

import structlog

from viewings.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from viewings.models.base import utcnow
from viewings.models.identity import Identity
from viewings.models.meeting import Meeting, MeetingStatus, MeetingWithProperty
from viewings.models.property import PropertyRecord, PropertySummary
from viewings.models.queries import MeetingFilter, MeetingPage, MeetingStats
from viewings.notifications.dispatcher import NotificationDispatcher
from viewings.notifications.renderer import format_viewing_date
from viewings.repositories.meeting_repo import SORTABLE_COLUMNS, MeetingRepository
from viewings.repositories.property_repo import PropertyRepository
from viewings.scheduling.dates import parse_scheduled_at
from viewings.scheduling.schemas import TransitionResult

logger = structlog.get_logger()

MAX_PAGE_SIZE = 100

# Query-string names used by the admin dashboard
SORT_ALIASES = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "scheduledAt": "scheduled_at",
    "meetingDate": "scheduled_at",
    "requesterName": "requester_name",
    "userName": "requester_name",
    "propertyTitle": "property_title",
}


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class MeetingService:
    """Lifecycle operations and read queries for meeting requests."""

    def __init__(
        self,
        meetings: MeetingRepository,
        properties: PropertyRepository,
        notifications: NotificationDispatcher,
        conflict_window: timedelta = timedelta(hours=1),
        timezone: str = "UTC",
        upcoming_limit: int = 10,
        notify_on_cancel: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the meeting service.

        Args:
            meetings: Meeting store
            properties: Property directory used for titles, agents and cards
            notifications: Dispatcher for admin and requester emails
            conflict_window: Half-width of the per-requester exclusivity window
            timezone: Business timezone for naive dates and calendar-day stats
            upcoming_limit: Maximum meetings returned by the public availability list
            notify_on_cancel: Email the requester when a meeting is cancelled
            clock: Source of the current time
        """
        self._meetings = meetings
        self._properties = properties
        self._notifications = notifications
        self._window = conflict_window
        self._timezone = timezone
        self._upcoming_limit = upcoming_limit
        self._notify_on_cancel = notify_on_cancel
        self._now = clock

    # ── Lifecycle ───────────────────────────────────────────────────────

    async def create(
        self,
        property_id: str | None,
        requester: Identity,
        phone: str | None,
        scheduled_at: str | datetime | None,
        notes: str | None = None,
    ) -> Meeting:
        """Create a pending meeting request.

        Raises:
            ValidationError: Missing field, unparseable or non-future date
            NotFoundError: Property does not exist
            ConflictError: Requester has an active meeting within the window
        """
        for field, value in (
            ("property_id", property_id),
            ("phone", phone),
            ("scheduled_at", scheduled_at),
        ):
            if _is_blank(value):
                raise ValidationError("Please provide all required fields", field=field)

        prop = await self._properties.get_by_id(str(property_id).strip())
        if prop is None:
            raise NotFoundError("Property not found", field="property_id")

        when = parse_scheduled_at(scheduled_at, self._timezone)
        now = self._now()
        if when <= now:
            raise ValidationError("Meeting date must be in the future", field="scheduled_at")

        meeting = Meeting(
            property_id=prop.id,
            property_title=prop.title,
            requester_id=requester.id,
            requester_name=requester.name,
            requester_email=requester.email,
            requester_phone=str(phone).strip(),
            scheduled_at=when,
            notes=(notes or "").strip(),
            status=MeetingStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

        inserted = await self._meetings.insert_if_no_conflict(meeting, self._window)
        if not inserted:
            logger.info(
                "meeting request conflicts",
                requester_id=requester.id,
                scheduled_at=when.isoformat(),
            )
            raise ConflictError(
                "You already have a meeting scheduled around this time",
                field="scheduled_at",
            )

        logger.info(
            "meeting created",
            meeting_id=str(meeting.id),
            property_id=meeting.property_id,
            requester_id=requester.id,
        )
        await self._notifications.notify_admins_of_request(meeting)
        return meeting

    async def transition(
        self,
        meeting_id: str,
        target_status: str | MeetingStatus,
        caller: Identity,
        admin_response: str | None = None,
    ) -> TransitionResult:
        """Apply an admin decision to a meeting.

        Re-applying the current status is allowed: timestamps and the
        response text change, but the requester is not emailed again.

        Raises:
            ForbiddenError: Caller is not an admin
            NotFoundError: Meeting does not exist
            ValidationError: Unknown status value
        """
        if not caller.is_admin:
            raise ForbiddenError("Access denied. Admin privileges required.")

        meeting = await self._get_or_404(meeting_id)

        status = MeetingStatus.parse(target_status)
        if status is None:
            raise ValidationError("Invalid status", field="status")

        previous = meeting.status
        now = self._now()
        meeting.status = status
        meeting.admin_response = (admin_response or "").strip()
        meeting.responded_at = now
        meeting.touch(now)
        await self._meetings.save_status(meeting)

        logger.info(
            "meeting status changed",
            meeting_id=str(meeting.id),
            previous=previous.value,
            status=status.value,
            admin_id=caller.id,
        )

        notification_sent = False
        if status in (MeetingStatus.ACCEPTED, MeetingStatus.REJECTED) and previous != status:
            agent_name = None
            if status == MeetingStatus.ACCEPTED:
                agent_name = await self._agent_name(meeting.property_id)
            result = await self._notifications.notify_requester_decision(
                meeting, agent_name=agent_name
            )
            notification_sent = bool(result and result.success)

        return TransitionResult(meeting=meeting, notification_sent=notification_sent)

    async def cancel(self, meeting_id: str, caller: Identity) -> Meeting:
        """Cancel a future, non-terminal meeting.

        Raises:
            NotFoundError: Meeting does not exist
            ForbiddenError: Caller is neither the requester nor an admin
            ValidationError: Meeting is in the past or already terminal
        """
        meeting = await self._get_or_404(meeting_id)

        if meeting.requester_id != caller.id and not caller.is_admin:
            raise ForbiddenError("Not authorized to cancel this meeting")

        now = self._now()
        if meeting.scheduled_at < now:
            raise ValidationError("Cannot cancel past meetings", field="scheduled_at")

        if meeting.is_terminal:
            raise ValidationError(
                "Meeting is already cancelled or rejected", field="status"
            )

        meeting.status = MeetingStatus.CANCELLED
        meeting.touch(now)
        await self._meetings.save_status(meeting)

        logger.info(
            "meeting cancelled",
            meeting_id=str(meeting.id),
            cancelled_by=caller.id,
            by_admin=caller.id != meeting.requester_id,
        )

        if self._notify_on_cancel:
            await self._notifications.notify_requester_cancelled(meeting)
        return meeting

    async def reschedule(
        self,
        meeting_id: str,
        caller: Identity,
        new_scheduled_at: str | datetime | None,
    ) -> Meeting:
        """Move a meeting to a new time and send it back for approval.

        Raises:
            NotFoundError: Meeting does not exist
            ForbiddenError: Caller is not the requester
            ValidationError: Not pending/accepted, already past, or bad new date
            ConflictError: Requester has another active meeting near the new time
        """
        meeting = await self._get_or_404(meeting_id)

        if meeting.requester_id is None or meeting.requester_id != caller.id:
            raise ForbiddenError("Not authorized to reschedule this meeting")

        if not meeting.is_active:
            raise ValidationError("Cannot reschedule this meeting", field="status")

        now = self._now()
        if meeting.scheduled_at < now:
            raise ValidationError("Cannot reschedule past meetings", field="scheduled_at")

        when = parse_scheduled_at(new_scheduled_at, self._timezone)
        if when <= now:
            raise ValidationError(
                "New meeting date must be in the future", field="scheduled_at"
            )

        previous_at = meeting.scheduled_at
        meeting.scheduled_at = when
        meeting.status = MeetingStatus.PENDING
        meeting.admin_response = ""
        meeting.responded_at = None
        meeting.touch(now)

        updated = await self._meetings.reschedule_if_no_conflict(meeting, self._window)
        if not updated:
            current = await self._get_or_404(meeting_id)
            if not current.is_active:
                logger.info(
                    "reschedule lost to concurrent decision",
                    meeting_id=meeting_id,
                    status=current.status.value,
                )
                raise ValidationError("Cannot reschedule this meeting", field="status")
            raise ConflictError(
                "You already have a meeting scheduled around this time",
                field="scheduled_at",
            )

        logger.info(
            "meeting rescheduled",
            meeting_id=str(meeting.id),
            previous=previous_at.isoformat(),
            scheduled_at=when.isoformat(),
        )

        notes = (
            "Rescheduled meeting. Previous date: "
            f"{format_viewing_date(previous_at, self._timezone)}"
        )
        if meeting.notes:
            notes = f"{notes}. Client notes: {meeting.notes}"
        await self._notifications.notify_admins_of_request(
            meeting, notes=notes, rescheduled=True
        )
        return meeting

    # ── Queries ─────────────────────────────────────────────────────────

    async def list_for_requester(self, requester_id: str) -> list[MeetingWithProperty]:
        """Meetings of one requester, newest first, with current property cards."""
        meetings = await self._meetings.list_by_requester(requester_id)
        cards: dict[str, PropertySummary | None] = {}
        enriched = []
        for meeting in meetings:
            if meeting.property_id not in cards:
                prop = await self._properties.get_by_id(meeting.property_id)
                cards[meeting.property_id] = prop.summary() if prop else None
            enriched.append(
                MeetingWithProperty(
                    **meeting.model_dump(),
                    property_summary=cards[meeting.property_id],
                )
            )
        return enriched

    async def list_for_admin(
        self,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 10,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> MeetingPage:
        """Filtered, sorted, paginated list of all meetings.

        Raises:
            ValidationError: Bad status, sort field, sort order or paging values
        """
        status_filter: MeetingStatus | None = None
        if status and status != "all":
            status_filter = MeetingStatus.parse(status)
            if status_filter is None:
                raise ValidationError("Invalid status", field="status")

        column = SORT_ALIASES.get(sort_by, sort_by)
        if column not in SORTABLE_COLUMNS:
            raise ValidationError(f"Cannot sort by {sort_by}", field="sort_by")

        order = sort_order.lower()
        if order not in ("asc", "desc"):
            raise ValidationError("Sort order must be asc or desc", field="sort_order")

        if page < 1:
            raise ValidationError("Page must be at least 1", field="page")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"Page size must be between 1 and {MAX_PAGE_SIZE}", field="page_size"
            )

        search_text = search.strip() if search else None
        items, total = await self._meetings.search(
            MeetingFilter(status=status_filter, search=search_text or None),
            sort_by=column,
            descending=order == "desc",
            limit=page_size,
            offset=(page - 1) * page_size,
        )
        return MeetingPage(
            items=items,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size),
        )

    async def stats(self) -> MeetingStats:
        """Dashboard counts; calendar days follow the business timezone."""
        now = self._now()
        zone = ZoneInfo(self._timezone)
        today = now.astimezone(zone).date()
        today_start = datetime.combine(today, time.min, tzinfo=zone)
        tomorrow_start = datetime.combine(today + timedelta(days=1), time.min, tzinfo=zone)
        return await self._meetings.get_stats(now, today_start, tomorrow_start)

    async def list_upcoming_for_property(self, property_id: str) -> list[Meeting]:
        """Accepted future meetings of a property, soonest first."""
        return await self._meetings.list_upcoming_for_property(
            property_id, self._now(), self._upcoming_limit
        )

    # ── Helpers ─────────────────────────────────────────────────────────

    async def _get_or_404(self, meeting_id: str) -> Meeting:
        meeting = await self._meetings.get(meeting_id)
        if meeting is None:
            raise NotFoundError("Meeting not found")
        return meeting

    async def _agent_name(self, property_id: str) -> str | None:
        try:
            prop: PropertyRecord | None = await self._properties.get_by_id(property_id)
        except Exception as e:
            logger.warning("agent lookup failed", property_id=property_id, error=str(e))
            return None
        return prop.agent_name if prop else None
