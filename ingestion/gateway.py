"""Client for the AI chat-completions gateway."""

import base64
import json
import logging
from typing import Any, Optional

import httpx

from .config import GatewaySettings
from .errors import ExtractionError, GatewayError

logger = logging.getLogger(__name__)

PARSE_PROMPT = """You are a syllabus parser. Extract class schedule, topics, and assignments with time estimates.

Return ONLY valid JSON in this exact format (no markdown):
{{
  "schedule": {{
    "days": ["Monday", "Wednesday", "Friday"],
    "startTime": "10:00",
    "endTime": "11:00",
    "startDate": "2025-01-15",
    "endDate": "2025-05-15"
  }},
  "topics": [
    {{"title": "Week 1: Introduction", "description": "Overview", "orderIndex": 1, "estimatedMinutes": 60}}
  ],
  "assignments": [
    {{"title": "Problem Set 1", "dueDate": "2025-03-15", "type": "hw", "estimatedMinutes": 120}}
  ]
}}

Schedule extraction:
- Look for class meeting times (e.g., "MWF 10:00-11:00", "Tuesdays and Thursdays 2:00-3:30 PM")
- Use full day names: Monday, Tuesday, Wednesday, Thursday, Friday, Saturday, Sunday
- Give start and end times in 24-hour format (HH:mm)
- Give term start and end dates (YYYY-MM-DD) if available
- If no schedule is found, set schedule to null

Time estimates:
- Reading: 3-5 min/page
- Homework: 90-180 min
- Project: 300-600 min
- Exam prep: 180-360 min

Assignment types: "reading", "hw", "project", "exam"
Adjust estimates to a study budget of {weekday_hours}h per weekday."""

PARSE_INSTRUCTION = (
    "Parse this syllabus and extract the class meeting schedule, all topics and "
    "assignments with time estimates. Pay special attention to when the class meets."
)

PLAN_PROMPT = """Create a study schedule for assignments. Return ONLY a valid JSON array:
[
  {{"blockDate": "2025-02-10", "startTime": "18:00", "durationMinutes": 45, "assignmentIndex": 0}}
]

Rules:
- Weekdays: {weekday_hours}h max, after 4 PM
- Weekends: {weekend_hours}h max, flexible
- Spread sessions before due dates
- Leave a buffer of 1-2 days before deadlines
- Sessions last 15 to 240 minutes
- assignmentIndex is the zero-based position in the assignments array"""


class GatewayClient:
    """Sends syllabus parsing and study planning requests to the gateway.

    Both calls return the assistant's raw message text; turning it into
    typed data is left to :mod:`ingestion.extraction`.
    """

    def __init__(
        self,
        settings: GatewaySettings,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize the gateway client.

        Args:
            settings: Gateway URL, key, model and timeout.
            client: HTTP client to use; one is created from the settings
                when omitted.
        """
        self._settings = settings
        self._client = client or httpx.Client(timeout=settings.timeout)
        self._owns_client = client is None

    def close(self) -> None:
        """Close the HTTP client if this gateway created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GatewayClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _complete(
        self,
        messages: list[dict[str, Any]],
        timeout: Optional[float] = None,
    ) -> str:
        """Post a chat completion and return the message content.

        Args:
            messages: Chat messages to send.
            timeout: Upper bound in seconds for this request; the configured
                timeout applies when it is None or larger.

        Raises:
            GatewayError: On a non-2xx response.
            ExtractionError: If the response carries no message content.
            httpx.TimeoutException: If the gateway does not answer in time.
        """
        response = self._client.post(
            self._settings.url,
            headers={"Authorization": f"Bearer {self._settings.api_key}"},
            json={"model": self._settings.model, "messages": messages},
            timeout=(
                httpx.USE_CLIENT_DEFAULT
                if timeout is None
                else min(timeout, self._settings.timeout)
            ),
        )
        if response.is_error:
            logger.error("AI gateway error: %s %s", response.status_code, response.text)
            raise GatewayError(response.status_code, response.text)

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ExtractionError("AI gateway response has no message content") from exc

        if not isinstance(content, str):
            raise ExtractionError("AI gateway message content is not text")
        logger.debug("AI response: %s", content)
        return content

    def parse_syllabus(
        self,
        document: bytes,
        weekday_hours: float = 2,
        media_type: str = "application/pdf",
        timeout: Optional[float] = None,
    ) -> str:
        """Ask the model to extract schedule, topics and assignments.

        Args:
            document: Raw syllabus file contents.
            weekday_hours: Study hours per weekday, used to scale estimates.
            media_type: MIME type of ``document``.
            timeout: Upper bound in seconds for the request.

        Returns:
            The assistant message text.
        """
        encoded = base64.b64encode(document).decode("ascii")
        logger.info("Parsing syllabus (%d bytes) with %s", len(document), self._settings.model)
        return self._complete([
            {
                "role": "system",
                "content": PARSE_PROMPT.format(weekday_hours=weekday_hours),
            },
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": PARSE_INSTRUCTION},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{media_type};base64,{encoded}"},
                    },
                ],
            },
        ], timeout=timeout)

    def plan_sessions(
        self,
        assignments: list[dict[str, Any]],
        weekday_hours: float = 2,
        weekend_hours: float = 4,
        timeout: Optional[float] = None,
    ) -> str:
        """Ask the model to schedule study sessions for the assignments.

        Args:
            assignments: Planner payloads; list positions are the indexes the
                model refers back to.
            weekday_hours: Study hours available per weekday.
            weekend_hours: Study hours available per weekend day.
            timeout: Upper bound in seconds for the request.

        Returns:
            The assistant message text.
        """
        logger.info("Planning study sessions for %d assignments", len(assignments))
        return self._complete([
            {
                "role": "system",
                "content": PLAN_PROMPT.format(
                    weekday_hours=weekday_hours,
                    weekend_hours=weekend_hours,
                ),
            },
            {
                "role": "user",
                "content": (
                    "Create study blocks for these assignments: "
                    + json.dumps(assignments)
                ),
            },
        ], timeout=timeout)
