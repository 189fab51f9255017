"""UTC timestamp helpers.

Timestamps are persisted as second-precision UTC strings
(YYYY-MM-DD HH:MM:SS) so that lexical and chronological order agree.
"""

from datetime import datetime, timezone

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Soft-delete sentinel for records that were never deleted
MAX_DATETIME = "9999-12-31 23:59:59"


def utc_now() -> datetime:
    """Current UTC time truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def now_string() -> str:
    """Current UTC time in storage format."""
    return format_datetime(utc_now())


def format_datetime(value: datetime) -> str:
    """Format a datetime for storage.

    Naive datetimes are assumed to already be UTC; aware ones are converted.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(DATETIME_FORMAT)


def parse_datetime(value: str) -> datetime | None:
    """Parse a stored timestamp into an aware UTC datetime.

    Accepts the storage format as well as ISO 8601 strings. Returns None for
    empty values.

    Raises:
        ValueError: If the value is not a recognisable timestamp.
    """
    if not value:
        return None
    try:
        parsed = datetime.strptime(value, DATETIME_FORMAT)
    except ValueError:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_datetime(value: str | datetime) -> str:
    """Normalize a datetime or timestamp string to storage format."""
    if isinstance(value, datetime):
        return format_datetime(value)
    parsed = parse_datetime(value)
    if parsed is None:
        return ""
    return format_datetime(parsed)
