import dataclasses

import pytest

from chatcal.event_models import (
    SCHEDULE_RESPONSE_SCHEMA,
    Event,
    Schedule,
    ScheduleFormatError,
    ScheduleResult,
)


def test_schedule_from_dict():
    schedule = Schedule.from_dict({
        "timezone": "America/New_York",
        "events": [
            {"title": "Gym", "start_local": "2026-02-09T07:00", "end_local": "2026-02-09T08:00"},
            {
                "title": "Study",
                "start_local": "2026-02-09T09:00",
                "end_local": "2026-02-09T11:00",
                "description": "Chapter 3",
                "location": "",
            },
        ],
    })
    assert schedule.timezone == "America/New_York"
    assert [event.title for event in schedule.events] == ["Gym", "Study"]
    assert schedule.events[0].description is None
    assert schedule.events[1].description == "Chapter 3"
    assert schedule.events[1].location is None


def test_missing_required_event_fields_become_empty():
    event = Event.from_dict({"title": "Gym"})
    assert event.start_local == ""
    assert event.end_local == ""


@pytest.mark.parametrize("payload", [
    None,
    [],
    "schedule",
    {"timezone": "UTC", "events": "nope"},
    {"timezone": "UTC", "events": ["not an event"]},
])
def test_bad_shapes_fail_fast(payload):
    with pytest.raises(ScheduleFormatError):
        Schedule.from_dict(payload)


def test_round_trip_to_dict(gym_schedule):
    assert Schedule.from_dict(gym_schedule.to_dict()) == gym_schedule


def test_models_are_immutable(gym_event):
    with pytest.raises(dataclasses.FrozenInstanceError):
        gym_event.title = "Nap"

    events = [gym_event]
    schedule = Schedule("UTC", events)
    events.append(gym_event)
    assert len(schedule.events) == 1
    assert isinstance(schedule.events, tuple)


def test_schedule_result_to_dict(gym_schedule):
    assert "warnings" not in ScheduleResult(gym_schedule).to_dict()
    data = ScheduleResult(gym_schedule, warnings=("Timezone is required",)).to_dict()
    assert data["warnings"] == ["Timezone is required"]
    assert data["events"][0]["title"] == "Gym"


def test_response_schema_requires_core_fields():
    item = SCHEDULE_RESPONSE_SCHEMA["properties"]["events"]["items"]
    assert item["required"] == ["title", "start_local", "end_local"]
    assert SCHEDULE_RESPONSE_SCHEMA["required"] == ["timezone", "events"]
    assert item["additionalProperties"] is False
