"""
Decoding and display of log-backend timestamps.

The backend exports timestamps as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (UTC, exactly
three fractional digits). Decoded values are timezone-aware datetimes, so
subtracting two of them yields a signed ``timedelta``.
"""

import re
from datetime import datetime, timedelta, timezone

from repeater.errors import BadTimestampError

_TIMESTAMP_PATTERN = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})\.(\d{3})Z"
)


def parse_timestamp(value: str) -> datetime:
    """Parse a backend timestamp into an aware UTC datetime.

    Args:
        value: Timestamp string, e.g. ``2024-01-01T12:00:00.500Z``

    Returns:
        Datetime in UTC with millisecond resolution

    Raises:
        BadTimestampError: If the string does not have the expected shape or
            names an impossible date or time
    """
    if not isinstance(value, str):
        raise BadTimestampError(f"Timestamp is not a string: {value!r}")

    match = _TIMESTAMP_PATTERN.fullmatch(value)
    if match is None:
        raise BadTimestampError(f"Malformed timestamp: {value!r}")

    year, month, day, hour, minute, second, millis = (int(part) for part in match.groups())
    try:
        return datetime(
            year, month, day, hour, minute, second, millis * 1000, tzinfo=timezone.utc
        )
    except ValueError as e:
        raise BadTimestampError(f"Invalid timestamp {value!r}: {e}") from e


def format_timestamp(value: datetime) -> str:
    """Render a timestamp for the ``print`` listing.

    Whole seconds render as ``2024-01-01T00:00:00 UTC``; otherwise the
    milliseconds are kept, as in ``2024-01-01T00:00:00.500 UTC``.
    """
    value = value.astimezone(timezone.utc)
    rendered = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        rendered += f".{value.microsecond // 1000:03d}"
    return f"{rendered} UTC"


def format_offset(offset: timedelta) -> str:
    """Render an offset as ``+<seconds> s`` with the number right-aligned to 12."""
    return f"+{offset.total_seconds():>12.3f} s"
