from chatcal.event_models import ScheduleResult
from chatcal.schedule_llm_client import GenerationFailure
from chatcal.ui_state import (
    EXAMPLE_PROMPTS,
    AppState,
    clear_copied,
    format_event_time,
    highlighted_days,
    mark_copied,
    receive_result,
    submit_request,
    use_example,
)


def test_blank_submit_sets_error():
    state = submit_request(AppState(message="   "))
    assert state.error == "Please enter a message"
    assert not state.loading


def test_request_lifecycle(gym_schedule):
    state = use_example(AppState(), 1)
    assert state.message == EXAMPLE_PROMPTS[1]

    state = submit_request(state)
    assert state.loading and state.error is None and state.result is None

    result = ScheduleResult(gym_schedule)
    state = receive_result(state, result)
    assert not state.loading
    assert state.result is result

    state = mark_copied(state, 0)
    assert state.copied_index == 0
    assert clear_copied(state).copied_index is None


def test_failure_result(gym_schedule):
    state = AppState(message="gym", result=ScheduleResult(gym_schedule), loading=True)
    state = receive_result(state, GenerationFailure("rate_limited", "Rate limit exceeded.", 429))
    assert state.error == "Rate limit exceeded."
    assert state.result is None
    assert not state.loading


def test_transitions_do_not_mutate():
    original = AppState(message="plan my week")
    submit_request(original)
    assert original == AppState(message="plan my week")


def test_format_event_time():
    assert format_event_time("2026-02-09T07:00") == "Mon, Feb 9, 7:00 AM"
    assert format_event_time("2026-02-10T00:05") == "Tue, Feb 10, 12:05 AM"
    assert format_event_time("2026-02-11T13:30") == "Wed, Feb 11, 1:30 PM"
    assert format_event_time("whenever") == "whenever"


def test_highlighted_days_deterministic():
    first = highlighted_days(2026, 2, seed="abc")
    assert first == highlighted_days(2026, 2, seed="abc")
    assert all(1 <= day <= 28 for day in first)
    assert highlighted_days(2026, 2, seed="abc", ratio=0) == set()
    assert highlighted_days(2026, 2, seed="abc", ratio=1) == set(range(1, 29))
