"""
Event data models for schedule generation and export.
Defines Event and Schedule (from the LLM), ValidationResult and ScheduleResult.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple


class ScheduleFormatError(ValueError):
    """Raised when a schedule payload does not have the expected shape."""


# JSON schema sent with the completion request (strict structured output).
SCHEDULE_RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "timezone": {
            "type": "string",
            "description": "IANA timezone identifier (e.g., America/New_York)",
        },
        "events": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {
                        "type": "string",
                        "description": "Event title",
                    },
                    "start_local": {
                        "type": "string",
                        "description": "Event start time in local timezone (YYYY-MM-DDTHH:mm format)",
                    },
                    "end_local": {
                        "type": "string",
                        "description": "Event end time in local timezone (YYYY-MM-DDTHH:mm format)",
                    },
                    "description": {
                        "type": "string",
                        "description": "Optional event description",
                    },
                    "location": {
                        "type": "string",
                        "description": "Optional event location",
                    },
                },
                "required": ["title", "start_local", "end_local"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["timezone", "events"],
    "additionalProperties": False,
}


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text else None


@dataclass(frozen=True)
class Event:
    """
    One scheduled item as returned by the LLM.
    start_local / end_local are wall-clock strings (YYYY-MM-DDTHH:mm) with no offset.
    """
    title: str
    start_local: str
    end_local: str
    description: Optional[str] = None
    location: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Event":
        """
        Build an Event from one item of the LLM's `events` array.
        Missing required keys become empty strings so the validator can report them.
        """
        if not isinstance(data, dict):
            raise ScheduleFormatError(f"Event must be an object, got {type(data).__name__}")
        return cls(
            title=str(data.get("title") or ""),
            start_local=str(data.get("start_local") or ""),
            end_local=str(data.get("end_local") or ""),
            description=_optional_text(data.get("description")),
            location=_optional_text(data.get("location")),
        )

    def to_dict(self) -> dict:
        data = {
            "title": self.title,
            "start_local": self.start_local,
            "end_local": self.end_local,
        }
        if self.description:
            data["description"] = self.description
        if self.location:
            data["location"] = self.location
        return data


@dataclass(frozen=True)
class Schedule:
    """A timezone tag plus the events in the order the LLM returned them."""
    timezone: str
    events: Tuple[Event, ...] = ()

    def __post_init__(self):
        # Accept any sequence but store a tuple so the schedule stays immutable
        object.__setattr__(self, "events", tuple(self.events))

    @classmethod
    def from_dict(cls, data: Any) -> "Schedule":
        """
        Build a Schedule from the LLM's JSON payload.

        Raises:
            ScheduleFormatError: if the payload is not an object or `events` is not a list
        """
        if not isinstance(data, dict):
            raise ScheduleFormatError(f"Schedule must be an object, got {type(data).__name__}")
        events = data.get("events", [])
        if not isinstance(events, list):
            raise ScheduleFormatError("Schedule 'events' must be a list")
        return cls(
            timezone=str(data.get("timezone") or ""),
            events=tuple(Event.from_dict(item) for item in events),
        )

    def to_dict(self) -> dict:
        return {
            "timezone": self.timezone,
            "events": [event.to_dict() for event in self.events],
        }


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one validation pass. Errors are in discovery order."""
    is_valid: bool
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScheduleResult:
    """
    A generated schedule handed back to the caller.
    Validation errors travel alongside as warnings; the schedule is never dropped.
    """
    schedule: Schedule
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def to_dict(self) -> dict:
        data = self.schedule.to_dict()
        if self.warnings:
            data["warnings"] = list(self.warnings)
        return data
