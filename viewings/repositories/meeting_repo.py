"""Repository for meeting requests.

Owns the meetings table, the conflict-window query and the read-side
aggregations. Conflict detection is folded into the INSERT/UPDATE
statement itself so that two concurrent requests for the same requester
cannot both pass the check: SQLite serializes writers, and each statement
re-evaluates NOT EXISTS under the write lock.
"""

import logging
from datetime import datetime, timedelta
from typing import Any

from viewings.db.timestamps import decode_ts, encode_ts
from viewings.db.turso import TursoClient
from viewings.models.meeting import ACTIVE_STATUSES, Meeting, MeetingStatus
from viewings.models.queries import MeetingFilter, MeetingStats

logger = logging.getLogger(__name__)

MEETING_COLUMNS = (
    "id",
    "property_id",
    "property_title",
    "requester_id",
    "requester_name",
    "requester_email",
    "requester_phone",
    "scheduled_at",
    "notes",
    "status",
    "admin_response",
    "responded_at",
    "created_at",
    "updated_at",
)

SORTABLE_COLUMNS = frozenset(
    {
        "created_at",
        "updated_at",
        "scheduled_at",
        "status",
        "requester_name",
        "property_title",
    }
)

SEARCHABLE_COLUMNS = (
    "requester_name",
    "requester_email",
    "requester_phone",
    "property_title",
)

_SELECT = f"SELECT {', '.join(MEETING_COLUMNS)} FROM meetings"
_ACTIVE_SQL = ", ".join(f"'{s.value}'" for s in sorted(ACTIVE_STATUSES))

# Another active meeting of the same requester inside [lower, upper]
_CONFLICT_PREDICATE = f"""
    SELECT 1 FROM meetings
    WHERE requester_id = ?
      AND id != ?
      AND status IN ({_ACTIVE_SQL})
      AND scheduled_at >= ?
      AND scheduled_at <= ?
"""


def _escape_like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.casefold()}%"


def _search_text(meeting: Meeting) -> str:
    # SQLite LOWER() only folds ASCII; fold accented names here instead
    return "\n".join(getattr(meeting, col) or "" for col in SEARCHABLE_COLUMNS).casefold()


def _to_params(meeting: Meeting) -> list[Any]:
    return [
        str(meeting.id),
        meeting.property_id,
        meeting.property_title,
        meeting.requester_id,
        meeting.requester_name,
        meeting.requester_email,
        meeting.requester_phone,
        encode_ts(meeting.scheduled_at),
        meeting.notes,
        meeting.status.value,
        meeting.admin_response,
        encode_ts(meeting.responded_at) if meeting.responded_at else None,
        encode_ts(meeting.created_at),
        encode_ts(meeting.updated_at),
    ]


def _row_to_meeting(row: Any) -> Meeting:
    data = {col: row[i] for i, col in enumerate(MEETING_COLUMNS)}
    for col in ("scheduled_at", "responded_at", "created_at", "updated_at"):
        data[col] = decode_ts(data[col])
    return Meeting.model_validate(data)


def _window(scheduled_at: datetime, window: timedelta) -> tuple[str, str]:
    return encode_ts(scheduled_at - window), encode_ts(scheduled_at + window)


class MeetingRepository:
    """Repository for meeting persistence and queries.

    Meetings are never deleted here; cancellation and rejection are
    status values.
    """

    def __init__(self, db_client: TursoClient):
        """Initialize repository with database client.

        Args:
            db_client: TursoClient instance for database operations
        """
        self._db = db_client

    async def initialize(self) -> None:
        """Create meetings table and indexes if not exists."""
        statuses = ", ".join(f"'{s.value}'" for s in MeetingStatus)
        await self._db.execute_batch(
            [
                f"""
            CREATE TABLE IF NOT EXISTS meetings (
                id TEXT PRIMARY KEY,
                property_id TEXT NOT NULL,
                property_title TEXT NOT NULL,
                requester_id TEXT,
                requester_name TEXT NOT NULL,
                requester_email TEXT NOT NULL,
                requester_phone TEXT NOT NULL,
                scheduled_at TEXT NOT NULL,
                notes TEXT NOT NULL DEFAULT '',
                status TEXT NOT NULL DEFAULT 'pending'
                    CHECK (status IN ({statuses})),
                admin_response TEXT NOT NULL DEFAULT '',
                responded_at TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                search_text TEXT NOT NULL DEFAULT ''
            )
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_meetings_property_status
            ON meetings(property_id, status)
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_meetings_requester_email
            ON meetings(requester_email)
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_meetings_scheduled_at
            ON meetings(scheduled_at)
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_meetings_status_created
            ON meetings(status, created_at DESC)
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_meetings_requester_active
            ON meetings(requester_id, status, scheduled_at)
            """,
            ]
        )

    async def insert_if_no_conflict(self, meeting: Meeting, window: timedelta) -> bool:
        """Insert a meeting unless its requester has an overlapping active one.

        Args:
            meeting: Meeting to persist
            window: Half-width of the conflict window around scheduled_at

        Returns:
            True if inserted, False if a conflicting active meeting exists
        """
        lower, upper = _window(meeting.scheduled_at, window)
        columns = (*MEETING_COLUMNS, "search_text")
        placeholders = ", ".join("?" for _ in columns)
        result = await self._db.execute(
            f"""
            INSERT INTO meetings ({', '.join(columns)})
            SELECT {placeholders}
            WHERE NOT EXISTS ({_CONFLICT_PREDICATE})
            """,
            [
                *_to_params(meeting),
                _search_text(meeting),
                meeting.requester_id,
                str(meeting.id),
                lower,
                upper,
            ],
        )
        return result.rows_affected > 0

    async def reschedule_if_no_conflict(
        self, meeting: Meeting, window: timedelta
    ) -> bool:
        """Persist a rescheduled meeting unless the new slot conflicts.

        The meeting itself is excluded from the conflict check. The stored
        row must still be active, so a cancellation or rejection committed
        since the meeting was read is never reopened.

        Returns:
            True if updated, False if the stored meeting is no longer active
            or another active meeting is in the window
        """
        lower, upper = _window(meeting.scheduled_at, window)
        result = await self._db.execute(
            f"""
            UPDATE meetings
            SET scheduled_at = ?, status = ?, admin_response = ?,
                responded_at = ?, updated_at = ?
            WHERE id = ?
              AND status IN ({_ACTIVE_SQL})
              AND NOT EXISTS ({_CONFLICT_PREDICATE})
            """,
            [
                encode_ts(meeting.scheduled_at),
                meeting.status.value,
                meeting.admin_response,
                encode_ts(meeting.responded_at) if meeting.responded_at else None,
                encode_ts(meeting.updated_at),
                str(meeting.id),
                meeting.requester_id,
                str(meeting.id),
                lower,
                upper,
            ],
        )
        return result.rows_affected > 0

    async def get(self, meeting_id: str) -> Meeting | None:
        """Get a meeting by ID.

        Returns:
            Meeting if found, None otherwise
        """
        result = await self._db.execute(f"{_SELECT} WHERE id = ?", [meeting_id])
        return _row_to_meeting(result.rows[0]) if result.rows else None

    async def save_status(self, meeting: Meeting) -> bool:
        """Persist the mutable decision fields of a meeting.

        Writes status, admin_response, responded_at and updated_at.
        Last write wins.

        Returns:
            True if the meeting exists and was updated
        """
        result = await self._db.execute(
            """
            UPDATE meetings
            SET status = ?, admin_response = ?, responded_at = ?, updated_at = ?
            WHERE id = ?
            """,
            [
                meeting.status.value,
                meeting.admin_response,
                encode_ts(meeting.responded_at) if meeting.responded_at else None,
                encode_ts(meeting.updated_at),
                str(meeting.id),
            ],
        )
        updated = result.rows_affected > 0
        if updated:
            logger.debug(f"Meeting {meeting.id} saved with status {meeting.status.value}")
        return updated

    async def list_by_requester(self, requester_id: str) -> list[Meeting]:
        """All meetings of one requester, newest scheduled_at first."""
        result = await self._db.execute(
            f"{_SELECT} WHERE requester_id = ? ORDER BY scheduled_at DESC",
            [requester_id],
        )
        return [_row_to_meeting(row) for row in result.rows]

    async def search(
        self,
        filter: MeetingFilter | None = None,
        sort_by: str = "created_at",
        descending: bool = True,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[Meeting], int]:
        """Filtered, sorted, paginated meeting list.

        Args:
            filter: Optional status and free-text criteria
            sort_by: Column from SORTABLE_COLUMNS
            descending: Sort direction
            limit: Page size
            offset: Rows to skip

        Returns:
            Tuple of (page items, total matching rows)
        """
        filter = filter or MeetingFilter()
        if sort_by not in SORTABLE_COLUMNS:
            msg = f"Unsupported sort column: {sort_by}"
            raise ValueError(msg)

        where_clauses: list[str] = []
        params: list[Any] = []

        if filter.status:
            where_clauses.append("status = ?")
            params.append(filter.status.value)

        if filter.search:
            where_clauses.append("search_text LIKE ? ESCAPE '\\'")
            params.append(_escape_like(filter.search))

        where_sql = f"WHERE {' AND '.join(where_clauses)}" if where_clauses else ""
        direction = "DESC" if descending else "ASC"

        count_result = await self._db.execute(
            f"SELECT COUNT(*) FROM meetings {where_sql}", params
        )
        total = count_result.rows[0][0] if count_result.rows else 0

        result = await self._db.execute(
            f"""
            {_SELECT}
            {where_sql}
            ORDER BY {sort_by} {direction}, id {direction}
            LIMIT ? OFFSET ?
            """,
            [*params, limit, offset],
        )
        return [_row_to_meeting(row) for row in result.rows], total

    async def get_stats(
        self,
        now: datetime,
        today_start: datetime,
        tomorrow_start: datetime,
    ) -> MeetingStats:
        """Aggregate counts in a single query.

        Args:
            now: Reference instant for "upcoming"
            today_start: Start of the current calendar day
            tomorrow_start: Start of the next calendar day

        Returns:
            MeetingStats with per-status and time-window counts
        """
        tomorrow_end = tomorrow_start + timedelta(hours=24)
        result = await self._db.execute(
            """
            SELECT
                COUNT(*) AS total,
                COUNT(CASE WHEN status = 'pending' THEN 1 END),
                COUNT(CASE WHEN status = 'accepted' THEN 1 END),
                COUNT(CASE WHEN status = 'rejected' THEN 1 END),
                COUNT(CASE WHEN status = 'cancelled' THEN 1 END),
                COUNT(CASE WHEN created_at >= ? AND created_at < ? THEN 1 END),
                COUNT(CASE WHEN status = 'accepted' AND scheduled_at >= ? THEN 1 END),
                COUNT(CASE WHEN status = 'accepted'
                    AND scheduled_at >= ? AND scheduled_at < ? THEN 1 END)
            FROM meetings
            """,
            [
                encode_ts(today_start),
                encode_ts(tomorrow_start),
                encode_ts(now),
                encode_ts(tomorrow_start),
                encode_ts(tomorrow_end),
            ],
        )
        row = result.rows[0] if result.rows else (0,) * 8
        return MeetingStats(
            total=row[0] or 0,
            pending=row[1] or 0,
            accepted=row[2] or 0,
            rejected=row[3] or 0,
            cancelled=row[4] or 0,
            created_today=row[5] or 0,
            upcoming_accepted=row[6] or 0,
            accepted_tomorrow=row[7] or 0,
        )

    async def list_upcoming_for_property(
        self, property_id: str, now: datetime, limit: int = 10
    ) -> list[Meeting]:
        """Accepted future meetings of a property, soonest first."""
        result = await self._db.execute(
            f"""
            {_SELECT}
            WHERE property_id = ? AND status = ? AND scheduled_at >= ?
            ORDER BY scheduled_at ASC
            LIMIT ?
            """,
            [property_id, MeetingStatus.ACCEPTED.value, encode_ts(now), limit],
        )
        return [_row_to_meeting(row) for row in result.rows]
