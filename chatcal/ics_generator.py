"""
ICS Generator for creating iCalendar (.ics) documents.
Generates RFC5545-style calendars with one VEVENT per scheduled event,
converted to UTC, escaped and folded at 75 characters.
"""

import re
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from dateutil import tz as dateutil_tz

from chatcal.event_models import Event, Schedule
from chatcal.event_normalizer import TimezoneLike, resolve_timezone, to_utc
from chatcal.logging_helper import Log
from chatcal.settings_manager import get_ics_output_path

PRODUCT_ID = "-//Chat to Calendar//EN"
UID_DOMAIN = "chat-to-calendar"
ICS_MIME_TYPE = "text/calendar;charset=utf-8"
CRLF = "\r\n"

MAX_LINE_LENGTH = 75
CONTINUATION_LENGTH = MAX_LINE_LENGTH - 1

_UNESCAPES = {"\\": "\\", ";": ";", ",": ",", "n": "\n", "N": "\n"}


def escape_ical_text(text: Optional[str]) -> str:
    """
    Escape text for iCalendar format (RFC5545).
    Escapes backslashes, semicolons, commas and newlines.

    Args:
        text: Text to escape

    Returns:
        Escaped text safe for a property value
    """
    if text is None:
        return ""

    # Replace backslashes first (before other replacements)
    text = text.replace('\\', '\\\\')
    # Escape semicolons
    text = text.replace(';', '\\;')
    # Escape commas
    text = text.replace(',', '\\,')
    # Escape newlines, CRLF and bare CR count as one newline
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = text.replace('\n', '\\n')
    return text


def unescape_ical_text(text: str) -> str:
    """Reverse escape_ical_text in a single left-to-right pass."""
    result = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text) and text[i + 1] in _UNESCAPES:
            result.append(_UNESCAPES[text[i + 1]])
            i += 2
        else:
            result.append(char)
            i += 1
    return "".join(result)


def fold_line(line: str) -> str:
    """
    Fold a content line longer than 75 characters.
    The first chunk keeps 75 characters; each continuation starts with a
    space followed by at most 74 characters. Chunks are joined with CRLF.
    """
    if len(line) <= MAX_LINE_LENGTH:
        return line

    folded = [line[:MAX_LINE_LENGTH]]
    remaining = line[MAX_LINE_LENGTH:]
    while remaining:
        folded.append(" " + remaining[:CONTINUATION_LENGTH])
        remaining = remaining[CONTINUATION_LENGTH:]
    return CRLF.join(folded)


def unfold_lines(text: str) -> str:
    """Remove folding (CRLF followed by one space or tab)."""
    return re.sub(r"\r\n[ \t]", "", text)


def format_ical_datetime(dt: datetime) -> str:
    """
    Format datetime to iCalendar format (UTC).

    Args:
        dt: timezone-aware datetime (naive values are treated as system local time)

    Returns:
        Formatted datetime string (YYYYMMDDTHHMMSSZ)
    """
    if dt.tzinfo is None:
        system_tz = dateutil_tz.tzlocal()
        dt = dt.replace(tzinfo=system_tz)
        Log.warn(f"Datetime missing timezone info, assuming system timezone: {system_tz}")

    dt_utc = dt.astimezone(dateutil_tz.UTC)
    return f"{dt_utc.year:04d}{dt_utc:%m%dT%H%M%S}Z"


def generate_uid(event: Event, index: int, timestamp_ms: Optional[int] = None) -> str:
    """
    Generate a unique identifier for an event:
    <generation time in ms>-<alphanumeric title/start/position>@chat-to-calendar
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    fragment = re.sub(r'[^a-zA-Z0-9]', '', f"{event.title}-{event.start_local}-{index}")
    return f"{timestamp_ms}-{fragment}@{UID_DOMAIN}"


def build_vevent(
    event: Event,
    index: int,
    timezone: TimezoneLike,
    dtstamp: datetime,
    timestamp_ms: Optional[int] = None,
) -> List[str]:
    """
    Build the unfolded content lines of one VEVENT block.

    Raises:
        DateTimeFormatError: if start_local or end_local cannot be parsed
    """
    lines = [
        "BEGIN:VEVENT",
        f"UID:{generate_uid(event, index, timestamp_ms)}",
        f"DTSTAMP:{format_ical_datetime(dtstamp)}",
        f"DTSTART:{format_ical_datetime(to_utc(event.start_local, timezone, 'start'))}",
        f"DTEND:{format_ical_datetime(to_utc(event.end_local, timezone, 'end'))}",
        f"SUMMARY:{escape_ical_text(event.title)}",
    ]

    if event.description:
        lines.append(f"DESCRIPTION:{escape_ical_text(event.description)}")

    if event.location:
        lines.append(f"LOCATION:{escape_ical_text(event.location)}")

    lines.append("END:VEVENT")
    return lines


def generate_ics(schedule: Schedule, now: Optional[datetime] = None) -> str:
    """
    Generate a complete calendar document from a schedule.
    The schedule is encoded as given; overlaps and timing are not re-checked.

    Args:
        schedule: Schedule to encode
        now: generation instant for DTSTAMP and UIDs (defaults to current UTC time)

    Returns:
        ICS document, lines folded and joined with CRLF
    """
    Log.section("ICS Generator")
    Log.info(f"Generating ICS for {len(schedule.events)} event(s) in {schedule.timezone or 'unknown timezone'}")

    if now is None:
        now = datetime.now(dateutil_tz.UTC)
        timestamp_ms = time.time_ns() // 1_000_000
    else:
        timestamp_ms = int(now.timestamp() * 1000)

    zone = resolve_timezone(schedule.timezone)

    ics_lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODUCT_ID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        f"X-WR-TIMEZONE:{schedule.timezone}",
    ]

    for index, event in enumerate(schedule.events):
        ics_lines.extend(build_vevent(event, index, zone, now, timestamp_ms))

    ics_lines.append("END:VCALENDAR")

    content = CRLF.join(fold_line(line) for line in ics_lines)
    Log.kv({
        "stage": "ics",
        "result": "success",
        "events": len(schedule.events),
        "bytes": len(content.encode('utf-8')),
    })
    return content


def write_ics(schedule: Schedule, path: Optional[Path] = None) -> Path:
    """
    Write the calendar document for a schedule to disk.

    Args:
        schedule: Schedule to export
        path: destination file (defaults to the configured download location)

    Returns:
        Path of the written file
    """
    ics_path = Path(path) if path is not None else get_ics_output_path()
    ics_path.parent.mkdir(parents=True, exist_ok=True)

    content = generate_ics(schedule)
    # newline='' keeps the CRLF terminators byte-exact on every platform
    with open(ics_path, 'w', encoding='utf-8', newline='') as ics_file:
        ics_file.write(content)

    Log.info(f"ICS file written: {ics_path}")
    Log.kv({"stage": "ics", "action": "file_written", "ics_path": str(ics_path), "mime_type": ICS_MIME_TYPE})
    return ics_path
