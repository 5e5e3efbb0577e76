"""
Schedule validator for generated event lists.
Checks timezone presence, per-event timing and pairwise overlaps.
Reports every problem found; never repairs or rejects the schedule.
"""

from datetime import datetime, tzinfo
from typing import List, Optional, Sequence, Tuple

from chatcal.event_models import Event, Schedule, ValidationResult
from chatcal.event_normalizer import DateTimeFormatError, TimezoneLike, resolve_timezone, to_utc
from chatcal.logging_helper import Log


def _interval(event: Event, zone: tzinfo) -> Tuple[datetime, datetime]:
    return (
        to_utc(event.start_local, zone, "start"),
        to_utc(event.end_local, zone, "end"),
    )


def is_valid_event_timing(event: Event, timezone: TimezoneLike = None) -> bool:
    """
    Check that an event ends strictly after it starts.
    Equal instants and unparseable values are invalid.
    """
    try:
        start, end = _interval(event, resolve_timezone(timezone))
    except DateTimeFormatError:
        return False
    return end > start


def events_overlap(first: Event, second: Event, timezone: TimezoneLike = None) -> bool:
    """
    Half-open interval overlap: touching endpoints do not count.
    Symmetric in its two arguments.

    Raises:
        DateTimeFormatError: if either event has an unparseable start or end
    """
    zone = resolve_timezone(timezone)
    start1, end1 = _interval(first, zone)
    start2, end2 = _interval(second, zone)
    return start1 < end2 and start2 < end1


def find_overlapping_events(events: Sequence[Event], timezone: TimezoneLike = None) -> List[Tuple[int, int]]:
    """
    Detect all overlapping event pairs.

    Args:
        events: events in schedule order
        timezone: schedule timezone used to read the wall-clock values

    Returns:
        (i, j) index pairs with i < j, ordered by i then j.
        Events with unparseable dates are skipped.
    """
    zone = resolve_timezone(timezone)
    intervals: List[Optional[Tuple[datetime, datetime]]] = []
    for event in events:
        try:
            intervals.append(_interval(event, zone))
        except DateTimeFormatError:
            intervals.append(None)

    overlaps = []
    for i in range(len(intervals)):
        if intervals[i] is None:
            continue
        start_i, end_i = intervals[i]
        for j in range(i + 1, len(intervals)):
            if intervals[j] is None:
                continue
            start_j, end_j = intervals[j]
            if start_i < end_j and start_j < end_i:
                overlaps.append((i, j))
    return overlaps


def _timing_error(index: int, event: Event, zone: tzinfo) -> Optional[str]:
    label = f"Event {index + 1} ({event.title})"
    try:
        start, end = _interval(event, zone)
    except DateTimeFormatError as err:
        return f"{label}: invalid {err.field_name} time '{err.value}'"
    if not end > start:
        return f"{label}: end time must be after start time"
    return None


def validate_schedule(schedule: Schedule) -> ValidationResult:
    """
    Validate an entire schedule.

    All errors are accumulated in order: missing timezone, per-event timing
    (1-based position), then overlapping pairs.

    Args:
        schedule: Schedule to check

    Returns:
        ValidationResult; is_valid is True only when no errors were found
    """
    errors = []

    if not schedule.timezone:
        errors.append("Timezone is required")

    zone = resolve_timezone(schedule.timezone)

    for index, event in enumerate(schedule.events):
        timing_error = _timing_error(index, event, zone)
        if timing_error:
            errors.append(timing_error)

    overlaps = find_overlapping_events(schedule.events, zone)
    for i, j in overlaps:
        errors.append(
            f'Events overlap: "{schedule.events[i].title}" and "{schedule.events[j].title}"'
        )

    result = ValidationResult(is_valid=not errors, errors=tuple(errors))
    Log.kv({
        "stage": "validate",
        "result": "valid" if result.is_valid else "invalid",
        "events": len(schedule.events),
        "overlaps": len(overlaps),
        "errors": len(errors),
    })
    return result
