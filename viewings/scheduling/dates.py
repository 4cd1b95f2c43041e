"""Parsing of requested viewing times.

Accepts ISO-8601 first and falls back to natural language ("next Friday
3pm") the way the booking form's free-text date field is used. Naive
values are read in the business timezone; results are aware UTC.
"""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import dateparser

from viewings.errors import ValidationError


def parse_scheduled_at(
    raw: str | datetime | None,
    timezone: str = "UTC",
    field: str = "scheduled_at",
) -> datetime:
    """Convert user input to an aware UTC datetime.

    Args:
        raw: ISO string, natural language string or datetime
        timezone: Zone used for values without an offset
        field: Field name reported in validation errors

    Returns:
        Aware datetime in UTC

    Raises:
        ValidationError: If the value is empty or cannot be parsed
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError("Missing required field", field=field)

    parsed: datetime | None
    if isinstance(raw, datetime):
        parsed = raw
    else:
        text = raw.strip()
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            try:
                parsed = dateparser.parse(
                    text,
                    settings={
                        "PREFER_DATES_FROM": "future",
                        "RETURN_AS_TIMEZONE_AWARE": False,
                    },
                )
            except Exception:
                # dateparser can raise various exceptions on malformed input
                parsed = None

    if parsed is None:
        raise ValidationError("Invalid date format", field=field)

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo(timezone))
    return parsed.astimezone(UTC)
