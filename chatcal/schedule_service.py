"""
Schedule service: the request/response boundary around the LLM client.
Checks the request, generates a schedule, validates it and returns it with warnings.
"""

from typing import Optional, Union

from chatcal.event_models import Schedule, ScheduleResult
from chatcal.logging_helper import Log
from chatcal.schedule_llm_client import GenerationFailure, ScheduleLLMClient, get_llm_client
from chatcal.schedule_validator import validate_schedule


def generate_schedule(message, client: Optional[ScheduleLLMClient] = None) -> Union[ScheduleResult, GenerationFailure]:
    """
    Generate and validate a schedule for a natural-language request.

    A schedule that fails validation is still returned, with the validation
    errors attached as warnings.

    Args:
        message: the user's request
        client: generation client (defaults to get_llm_client())

    Returns:
        ScheduleResult, or GenerationFailure when no schedule could be produced
    """
    Log.section("Schedule Service")

    if not message or not isinstance(message, str):
        Log.warn("Rejected request: message missing or not a string")
        Log.kv({"stage": "service", "result": "failed", "reason": "invalid_request"})
        return GenerationFailure(
            reason="invalid_request",
            message="Invalid request: message is required and must be a string",
            status_code=400,
        )

    if not message.strip():
        Log.warn("Rejected request: empty message")
        Log.kv({"stage": "service", "result": "failed", "reason": "empty_message"})
        return GenerationFailure(
            reason="empty_message",
            message="Invalid request: message cannot be empty",
            status_code=400,
        )

    if client is None:
        client = get_llm_client()

    outcome = client.generate_schedule(message)
    if isinstance(outcome, GenerationFailure):
        Log.kv({"stage": "service", "result": "failed", "reason": outcome.reason})
        return outcome

    if not isinstance(outcome, Schedule):
        raise TypeError(f"Client returned {type(outcome).__name__}, expected Schedule or GenerationFailure")

    validation = validate_schedule(outcome)
    if not validation.is_valid:
        Log.warn(f"Schedule validation failed: {list(validation.errors)}")

    Log.kv({
        "stage": "service",
        "result": "success",
        "events": len(outcome.events),
        "warnings": len(validation.errors),
    })
    return ScheduleResult(schedule=outcome, warnings=validation.errors)
