from urllib.parse import parse_qs, urlsplit

from chatcal.calendar_links import format_apple_datetime, generate_apple_calendar_link
from chatcal.event_models import Event


def test_link_with_all_fields():
    event = Event(
        "Gym", "2026-02-09T07:00", "2026-02-09T08:00",
        description="Upper body workout", location="Downtown Fitness",
    )
    link = generate_apple_calendar_link(event, "America/New_York")
    assert link == (
        "https://www.icloud.com/calendar/event?title=Gym&starts=20260209T070000"
        "&ends=20260209T080000&details=Upper+body+workout&location=Downtown+Fitness"
    )


def test_optional_parameters_omitted(gym_event):
    link = generate_apple_calendar_link(gym_event, "America/New_York")
    query = parse_qs(urlsplit(link).query)
    assert set(query) == {"title", "starts", "ends"}


def test_times_stay_wall_clock_without_timezone():
    event = Event("Late call", "2026-07-01T23:30", "2026-07-02T00:15")
    for timezone in ("America/New_York", "Asia/Tokyo", None):
        query = parse_qs(urlsplit(generate_apple_calendar_link(event, timezone)).query)
        assert query["starts"] == ["20260701T233000"]
        assert query["ends"] == ["20260702T001500"]
        assert "timezone" not in query


def test_special_characters_are_encoded():
    event = Event("Q1 review & plan", "2026-02-09T07:00", "2026-02-09T08:00", location="Room #4, 2/F")
    link = generate_apple_calendar_link(event, "UTC")
    assert "&" not in link.split("title=", 1)[1].split("&starts", 1)[0]
    query = parse_qs(urlsplit(link).query)
    assert query["title"] == ["Q1 review & plan"]
    assert query["location"] == ["Room #4, 2/F"]


def test_malformed_event_gives_empty_parameters():
    event = Event("", "soon", "")
    link = generate_apple_calendar_link(event, "America/New_York")
    assert link == "https://www.icloud.com/calendar/event?title=&starts=&ends="


def test_format_apple_datetime():
    assert format_apple_datetime("2026-02-09T07:05") == "20260209T070500"
    assert format_apple_datetime("2026-02-09T07:05:30") == "20260209T070530"
    assert format_apple_datetime("") == ""
    assert format_apple_datetime(None) == ""
    assert format_apple_datetime("garbage") == ""
    assert format_apple_datetime("0999-01-02T03:04") == "09990102T030400"
