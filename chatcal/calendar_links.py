"""
Calendar link generator for single events.
Builds iCloud "add to calendar" URLs with wall-clock start/end values.
"""

from typing import Optional
from urllib.parse import urlencode

from dateutil import parser as dateutil_parser

from chatcal.event_models import Event
from chatcal.logging_helper import Log

APPLE_CALENDAR_URL = "https://www.icloud.com/calendar/event"


def format_apple_datetime(local_value: Optional[str]) -> str:
    """
    Format a wall-clock string as YYYYMMDDTHHMMSS (no UTC conversion, no Z).

    Args:
        local_value: ISO datetime string (YYYY-MM-DDTHH:mm)

    Returns:
        Compact local datetime, or "" if the value cannot be parsed
    """
    if not local_value:
        return ""
    try:
        dt = dateutil_parser.isoparse(local_value.strip())
    except (ValueError, OverflowError, AttributeError):
        Log.warn(f"Unparseable datetime for calendar link: {local_value!r}")
        return ""
    return f"{dt.year:04d}{dt:%m%dT%H%M%S}"


def generate_apple_calendar_link(event: Event, timezone: Optional[str] = None) -> str:
    """
    Generate an iCloud calendar link for one event.

    The timezone is only used for display by callers; iCloud reads the
    start/end values as the viewer's local time.

    Args:
        event: The calendar event
        timezone: IANA timezone of the schedule (not embedded in the link)

    Returns:
        https://www.icloud.com/calendar/event?title=...&starts=...&ends=...[&details=...][&location=...]
    """
    params = [
        ("title", event.title or ""),
        ("starts", format_apple_datetime(event.start_local)),
        ("ends", format_apple_datetime(event.end_local)),
    ]

    if event.description:
        params.append(("details", event.description))

    if event.location:
        params.append(("location", event.location))

    url = f"{APPLE_CALENDAR_URL}?{urlencode(params)}"
    Log.kv({"stage": "link", "event_title": event.title, "timezone": timezone or "", "length": len(url)})
    return url
