"""
UI session state for the schedule page, kept as immutable values.
Each handler takes the current AppState and returns the next one.
"""

import calendar
import hashlib
from dataclasses import dataclass, replace
from typing import Optional, Set, Union

from dateutil import parser as dateutil_parser

from chatcal.event_models import ScheduleResult
from chatcal.schedule_llm_client import GenerationFailure

EXAMPLE_PROMPTS = (
    "Create a study schedule for next week, 2 hours per day",
    "Plan a workout routine: gym sessions Monday, Wednesday, Friday at 7am",
    "Schedule team meetings every Tuesday and Thursday at 2pm for the next month",
)


@dataclass(frozen=True)
class AppState:
    message: str = ""
    result: Optional[ScheduleResult] = None
    loading: bool = False
    error: Optional[str] = None
    copied_index: Optional[int] = None


def use_example(state: AppState, index: int) -> AppState:
    return replace(state, message=EXAMPLE_PROMPTS[index])


def submit_request(state: AppState) -> AppState:
    """Start a request: blank messages set an error instead of loading."""
    if not state.message.strip():
        return replace(state, error="Please enter a message")
    return replace(state, loading=True, error=None, result=None, copied_index=None)


def receive_result(state: AppState, outcome: Union[ScheduleResult, GenerationFailure]) -> AppState:
    if isinstance(outcome, GenerationFailure):
        return replace(state, loading=False, result=None, error=outcome.message or "Something went wrong")
    return replace(state, loading=False, result=outcome, error=None)


def mark_copied(state: AppState, index: int) -> AppState:
    return replace(state, copied_index=index)


def clear_copied(state: AppState) -> AppState:
    return replace(state, copied_index=None)


def format_event_time(local_value: str) -> str:
    """
    Short display form of a wall-clock value, e.g. "Mon, Feb 9, 7:00 AM".
    Unparseable values are returned unchanged.
    """
    try:
        dt = dateutil_parser.isoparse(local_value)
    except (ValueError, OverflowError, TypeError, AttributeError):
        return local_value
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{dt:%a}, {dt:%b} {dt.day}, {hour}:{dt:%M} {meridiem}"


def highlighted_days(year: int, month: int, seed: str = "", ratio: float = 0.3) -> Set[int]:
    """
    Days of the month to highlight in the calendar card.
    Deterministic in (year, month, day, seed): roughly `ratio` of the days are picked.
    """
    _, days_in_month = calendar.monthrange(year, month)
    picked = set()
    for day in range(1, days_in_month + 1):
        digest = hashlib.sha256(f"{year:04d}-{month:02d}-{day:02d}:{seed}".encode()).digest()
        if int.from_bytes(digest[:8], "big") / 2 ** 64 < ratio:
            picked.add(day)
    return picked
