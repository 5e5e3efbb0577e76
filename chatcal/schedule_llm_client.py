"""
Schedule LLM Client interface for turning a free-text request into a Schedule.
Supports StubScheduleLLMClient (offline) and OpenAIScheduleLLMClient (real provider).
"""

import json
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

import requests

from chatcal.event_models import SCHEDULE_RESPONSE_SCHEMA, Schedule, ScheduleFormatError
from chatcal.logging_helper import Log
from chatcal.settings_manager import get_default_timezone, get_openai_options

OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"

SYSTEM_PROMPT = """You are a schedule generator. Given a user's natural language request, generate a structured calendar schedule.

Rules:
1. If no specific start date is provided, assume the schedule starts next Monday
2. Use realistic event durations (e.g., workouts: 1-2 hours, study sessions: 1-3 hours, meetings: 0.5-2 hours)
3. Ensure NO overlapping events - events must not conflict with each other
4. The end_local time MUST be after the start_local time for every event
5. Use the format YYYY-MM-DDTHH:mm for all datetime fields (example: 2026-02-10T09:00)
6. Default timezone is {default_timezone} unless the user specifies otherwise
7. Be realistic about scheduling - don't pack events too tightly, allow for breaks
8. Include helpful descriptions when appropriate (e.g., "Upper body workout" for a gym session)

Return ONLY valid JSON matching the schema. Do not include any explanatory text."""


@dataclass(frozen=True)
class GenerationFailure:
    """
    A schedule could not be produced.
    status_code follows HTTP meaning: 400 bad request, 429 rate limited, 500 otherwise.
    """
    reason: str
    message: str
    status_code: int = 500
    details: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"error": self.message}
        if self.details:
            data["details"] = self.details
        return data


GenerationOutcome = Union[Schedule, GenerationFailure]


def parse_schedule_content(content: Optional[str], provider: str) -> GenerationOutcome:
    """
    Parse the JSON text returned by a provider into a Schedule.

    Args:
        content: raw message content from the completion
        provider: provider name for logging

    Returns:
        Schedule, or GenerationFailure if the content is empty or not a schedule
    """
    if not content:
        Log.warn(f"Empty response from {provider}")
        Log.kv({"stage": "llm", "provider": provider, "result": "failed", "reason": "empty_response"})
        return GenerationFailure(reason="empty_response", message="No response from OpenAI")

    try:
        schedule = Schedule.from_dict(json.loads(content))
    except (json.JSONDecodeError, ScheduleFormatError) as e:
        Log.error(f"Failed to parse schedule response: {e}")
        Log.kv({"stage": "llm", "provider": provider, "result": "failed", "reason": "json_parse_error"})
        return GenerationFailure(
            reason="json_parse_error",
            message="Failed to parse schedule response",
            details=str(e),
        )

    Log.info(f"Schedule received ({provider}): {len(schedule.events)} event(s) in {schedule.timezone}")
    Log.kv({
        "stage": "llm",
        "provider": provider,
        "result": "success",
        "timezone": schedule.timezone,
        "events": len(schedule.events),
    })
    return schedule


class ScheduleLLMClient(ABC):
    """Abstract base class for schedule generation clients."""

    @abstractmethod
    def generate_schedule(self, message: str) -> GenerationOutcome:
        """
        Generate a schedule from a natural-language request.

        Args:
            message: the user's request

        Returns:
            Schedule on success, GenerationFailure otherwise
        """


class StubScheduleLLMClient(ScheduleLLMClient):
    """
    Stub LLM client for offline use and tests.
    Returns a fixed gym schedule in the same JSON shape as the real API.
    """

    STUB_RESPONSE = {
        "timezone": "America/New_York",
        "events": [
            {
                "title": "Gym",
                "start_local": "2026-02-09T07:00",
                "end_local": "2026-02-09T08:00",
                "description": "Upper body workout",
                "location": "Downtown Fitness",
            },
            {
                "title": "Gym",
                "start_local": "2026-02-11T07:00",
                "end_local": "2026-02-11T08:00",
                "description": "Lower body workout",
                "location": "Downtown Fitness",
            },
            {
                "title": "Gym",
                "start_local": "2026-02-13T07:00",
                "end_local": "2026-02-13T08:00",
                "description": "Cardio and core",
            },
        ],
    }

    def __init__(self, response: Optional[dict] = None):
        self.response = response if response is not None else self.STUB_RESPONSE

    def generate_schedule(self, message: str) -> GenerationOutcome:
        Log.section("Stub LLM Client")
        Log.info("Using stub LLM client (offline mode)")
        Log.info(f"Request: {message[:100]}")

        # Go through the same JSON path as OpenAIScheduleLLMClient
        return parse_schedule_content(json.dumps(self.response), provider="stub")


class OpenAIScheduleLLMClient(ScheduleLLMClient):
    """
    OpenAI chat completions client using Structured Outputs.
    One request per call: no retry, no streaming.
    """

    def __init__(self, api_key: str, model: Optional[str] = None, temperature: Optional[float] = None,
                 timeout: Optional[int] = None):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key from environment
            model: model supporting structured outputs (defaults to settings)
            temperature: sampling temperature (defaults to settings)
            timeout: request timeout in seconds (defaults to settings)
        """
        options = get_openai_options()
        self.api_key = api_key
        self.api_url = OPENAI_API_URL
        self.model = model or options["model"]
        self.temperature = options["temperature"] if temperature is None else temperature
        self.timeout = timeout or options["timeout"]

    def _build_payload(self, message: str) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT.format(default_timezone=get_default_timezone())},
                {"role": "user", "content": message},
            ],
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": "schedule_response",
                    "strict": True,
                    "schema": SCHEDULE_RESPONSE_SCHEMA,
                },
            },
            "temperature": self.temperature,
        }

    def generate_schedule(self, message: str) -> GenerationOutcome:
        Log.section("OpenAI LLM Client")
        Log.info(f"Using OpenAI chat completions ({self.model})")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        try:
            Log.kv({"stage": "llm", "provider": "openai", "model": self.model, "status": "requesting"})
            response = requests.post(
                self.api_url,
                headers=headers,
                json=self._build_payload(message),
                timeout=self.timeout
            )
            Log.info(f"API response status: {response.status_code}")

            if response.status_code == 401:
                Log.error("OpenAI rejected the API key")
                Log.kv({"stage": "llm", "provider": "openai", "result": "failed", "reason": "unauthorized"})
                return GenerationFailure(reason="unauthorized", message="Invalid OpenAI API key")

            if response.status_code == 429:
                Log.warn("OpenAI rate limit exceeded")
                Log.kv({"stage": "llm", "provider": "openai", "result": "failed", "reason": "rate_limited"})
                return GenerationFailure(
                    reason="rate_limited",
                    message="Rate limit exceeded. Please try again in a moment.",
                    status_code=429,
                )

            response.raise_for_status()

            result = response.json()
            choices = result.get('choices') or [{}]
            content = choices[0].get('message', {}).get('content', '')
            return parse_schedule_content(content, provider="openai")

        except requests.exceptions.RequestException as e:
            Log.error(f"OpenAI API request failed: {e}")
            Log.kv({"stage": "llm", "provider": "openai", "result": "failed", "reason": "api_error", "error": str(e)})
            return GenerationFailure(reason="api_error", message="Failed to generate schedule", details=str(e))

        except ValueError as e:
            # Body of a 2xx response that is not JSON
            Log.error(f"OpenAI API returned a non-JSON body: {e}")
            Log.kv({"stage": "llm", "provider": "openai", "result": "failed", "reason": "invalid_body"})
            return GenerationFailure(reason="invalid_body", message="Failed to generate schedule", details=str(e))


def get_llm_client() -> ScheduleLLMClient:
    """
    Factory function to get the appropriate LLM client.
    Uses OpenAIScheduleLLMClient if OPENAI_API_KEY is set, otherwise the stub.

    Can be forced to use stub by setting USE_STUB environment variable.

    Returns:
        ScheduleLLMClient instance
    """
    if os.getenv("USE_STUB"):
        Log.info("USE_STUB flag set - using stub client")
        return StubScheduleLLMClient()

    api_key = os.getenv("OPENAI_API_KEY")
    if api_key:
        Log.info("API key found - using OpenAI client")
        return OpenAIScheduleLLMClient(api_key)

    Log.info("No API key - using stub client")
    return StubScheduleLLMClient()
