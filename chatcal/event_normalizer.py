"""
Event normalizer for turning wall-clock event strings into timezone-aware datetimes.
Local values are read literally against the schedule's IANA timezone.
"""

from datetime import datetime, tzinfo
from typing import Optional, Union

from dateutil import parser as dateutil_parser
from dateutil import tz as dateutil_tz

from chatcal.logging_helper import Log

TimezoneLike = Union[str, tzinfo, None]


class DateTimeFormatError(ValueError):
    """Raised when an event date-time string cannot be parsed."""

    def __init__(self, value, field_name: Optional[str] = None):
        self.value = value
        self.field_name = field_name
        label = f"{field_name} " if field_name else ""
        super().__init__(f"Invalid {label}date-time value: {value!r}")


def resolve_timezone(timezone: TimezoneLike) -> tzinfo:
    """
    Resolve an IANA timezone name using the tz database.
    Falls back to the system timezone when the name is empty or unknown.

    Args:
        timezone: IANA name (e.g. "America/New_York"), a tzinfo, or None

    Returns:
        tzinfo for interpreting wall-clock values
    """
    if isinstance(timezone, tzinfo):
        return timezone

    if timezone:
        resolved = dateutil_tz.gettz(timezone)
        if resolved is not None:
            return resolved
        Log.warn(f"Unknown timezone '{timezone}', falling back to system timezone")
    return dateutil_tz.tzlocal()


def parse_local_datetime(value, timezone: TimezoneLike = None, field_name: Optional[str] = None) -> datetime:
    """
    Parse an ISO wall-clock string (YYYY-MM-DDTHH:mm[:ss]) into an aware datetime.

    Naive values are attached to `timezone`; a value that already carries an
    offset keeps it. Local times that fall in a DST gap are shifted forward.

    Raises:
        DateTimeFormatError: if the value is empty, not a string, or not ISO 8601
    """
    if not isinstance(value, str) or not value.strip():
        raise DateTimeFormatError(value, field_name)

    try:
        dt = dateutil_parser.isoparse(value.strip())
    except (ValueError, OverflowError) as err:
        raise DateTimeFormatError(value, field_name) from err

    if dt.tzinfo is None:
        try:
            dt = dt.replace(tzinfo=resolve_timezone(timezone))
            dt = dateutil_tz.resolve_imaginary(dt)
        except (OverflowError, ValueError) as err:
            # Wall-clock values at the edges of the datetime range
            raise DateTimeFormatError(value, field_name) from err
    return dt


def to_utc(value, timezone: TimezoneLike = None, field_name: Optional[str] = None) -> datetime:
    """Parse a wall-clock string and convert it to UTC."""
    dt = parse_local_datetime(value, timezone, field_name)
    try:
        return dt.astimezone(dateutil_tz.UTC)
    except (OverflowError, ValueError) as err:
        raise DateTimeFormatError(value, field_name) from err
