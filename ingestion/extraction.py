"""Validation of untyped AI gateway responses.

The gateway returns free-form text that usually, but not always, contains a
JSON document, sometimes wrapped in a markdown code fence. Everything here
turns that text into the typed values the scheduler works with and applies
the defaults the rest of the system relies on.
"""

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ValidationError

from scheduler.models import WeeklySchedule
from .errors import ExtractionError
from .schemas import AssignmentDraft, ScheduleSchema, Topic

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?[ \t]*\n(.*?)\n\s*```", re.DOTALL)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)


@dataclass
class ParsedSyllabus:
    """Validated result of the syllabus parsing call."""

    schedule: Optional[WeeklySchedule] = None
    topics: list[Topic] = field(default_factory=list)
    assignments: list[AssignmentDraft] = field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return total_estimated_minutes(self.topics, self.assignments)


def extract_json(text: str, expect: type = dict) -> Any:
    """Pull a JSON document out of an AI response.

    A fenced code block wins; otherwise the outermost ``{...}`` (or
    ``[...]`` when a list is expected) is used, falling back to the whole
    text.

    Args:
        text: Raw assistant message.
        expect: ``dict`` or ``list``, the required top-level JSON type.

    Returns:
        The decoded document.

    Raises:
        ExtractionError: If no JSON of the expected type can be decoded.
    """
    if not isinstance(text, str):
        raise ExtractionError(f"AI response must be text, got {type(text).__name__}")

    match = _FENCED_JSON.search(text)
    if match is None:
        match = (_JSON_ARRAY if expect is list else _JSON_OBJECT).search(text)
    json_text = (match.group(1) if match.groups() else match.group(0)) if match else text

    try:
        document = json.loads(json_text)
    except json.JSONDecodeError as exc:
        raise ExtractionError("AI returned invalid JSON format") from exc

    if not isinstance(document, expect):
        raise ExtractionError(
            f"AI returned a JSON {type(document).__name__}, expected {expect.__name__}"
        )
    return document


def coerce_schedule(raw: Any) -> Optional[WeeklySchedule]:
    """Validate the ``schedule`` object of a parsed syllabus.

    Returns:
        The weekly schedule, or None when it is absent or unusable.
    """
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        logger.warning("Ignoring schedule of type %s", type(raw).__name__)
        return None

    try:
        schedule = ScheduleSchema.model_validate(raw)
    except ValidationError as exc:
        logger.warning(
            "Ignoring unusable schedule (%d errors): %s",
            exc.error_count(),
            ", ".join(".".join(map(str, error["loc"])) for error in exc.errors()),
        )
        return None
    return schedule.to_weekly_schedule()


def _validate_each(raw: Any, model: type[BaseModel], name: str) -> list:
    """Validate list entries one at a time, dropping the unusable ones."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Ignoring %s of type %s", name, type(raw).__name__)
        return []

    items = []
    for entry in raw:
        try:
            items.append(model.model_validate(entry))
        except ValidationError:
            logger.warning("Dropping malformed entry in %s: %r", name, entry)
    return items


def coerce_syllabus(raw: Mapping) -> ParsedSyllabus:
    """Validate a decoded syllabus response.

    Args:
        raw: Output of :func:`extract_json` for the parsing call.

    Returns:
        Schedule, topics and assignments with defaults applied.
    """
    if not isinstance(raw, Mapping):
        raise ExtractionError(f"Syllabus must be a JSON object, got {type(raw).__name__}")

    parsed = ParsedSyllabus(
        schedule=coerce_schedule(raw.get("schedule")),
        topics=_validate_each(raw.get("topics"), Topic, "topics"),
        assignments=_validate_each(raw.get("assignments"), AssignmentDraft, "assignments"),
    )

    logger.info(
        "Parsed %d topics and %d assignments (schedule %s)",
        len(parsed.topics),
        len(parsed.assignments),
        "found" if parsed.schedule else "missing",
    )
    return parsed


def coerce_plan(raw: Any) -> list[Any]:
    """Validate a decoded planner response.

    Entries are left as-is; the merger validates them one by one.
    """
    if not isinstance(raw, list):
        logger.warning("Study plan is not a list: %s", type(raw).__name__)
        return []
    return raw


def total_estimated_minutes(
    topics: list[Topic],
    assignments: list[AssignmentDraft],
) -> int:
    """Total estimated workload of a class in minutes."""
    return sum(t.estimated_minutes for t in topics) + sum(
        a.estimated_minutes for a in assignments
    )
