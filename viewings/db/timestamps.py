"""Fixed-width UTC timestamp encoding for text columns.

SQLite has no native datetime type. Storing every instant in the same
zero-padded UTC form keeps lexicographic order equal to time order, so
range predicates and ORDER BY work directly on the text columns.
"""

from datetime import UTC, datetime

_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def encode_ts(value: datetime) -> str:
    """Encode an aware datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(_FORMAT)


def decode_ts(value: str | None) -> datetime | None:
    """Decode a stored timestamp back to an aware UTC datetime."""
    if value is None:
        return None
    return datetime.strptime(value, _FORMAT).replace(tzinfo=UTC)
