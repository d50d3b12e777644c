"""Pydantic models for the JSON shapes returned by the AI gateway.

Field names follow the gateway's camelCase keys through aliases; the Python
attributes are snake_case and can be populated by either name. Validators
apply the defaults the rest of the system relies on, so a model only fails
validation when a value is unusable rather than merely missing.
"""

import logging
import math
import re
from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from scheduler.models import WeeklySchedule
from scheduler.timeutils import parse_iso_date

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATED_MINUTES = 60
DEFAULT_ASSIGNMENT_TYPE = "reading"
ASSIGNMENT_TYPES = ("reading", "hw", "project", "exam")

_DAY_SEPARATORS = re.compile(r"[,/;\s]+")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _minutes(value: Any) -> int:
    """Positive whole minutes, or the default estimate."""
    if isinstance(value, bool):
        return DEFAULT_ESTIMATED_MINUTES
    if isinstance(value, float) and math.isfinite(value):
        value = round(value)
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and value > 0:
        return value
    return DEFAULT_ESTIMATED_MINUTES


class ScheduleSchema(BaseModel):
    """The ``schedule`` object of a parsed syllabus."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    days: list[str] = Field(min_length=1, description="Meeting day names or letters")
    start_time: str = Field(min_length=1, alias="startTime", description="HH:mm")
    end_time: str = Field(min_length=1, alias="endTime", description="HH:mm")
    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")

    @field_validator("days", mode="before")
    @classmethod
    def split_days(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [token for token in _DAY_SEPARATORS.split(value) if token]
        if isinstance(value, (list, tuple)):
            return [token for token in value if isinstance(token, str)]
        return value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> Optional[date]:
        if value is None or value == "":
            return None
        return parse_iso_date(value)

    def to_weekly_schedule(self) -> WeeklySchedule:
        return WeeklySchedule(
            days=tuple(self.days),
            start_time=self.start_time,
            end_time=self.end_time,
            start_date=self.start_date,
            end_date=self.end_date,
        )


class Topic(BaseModel):
    """A syllabus topic or lesson."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    order_index: int = Field(default=0, alias="orderIndex")
    estimated_minutes: int = Field(default=DEFAULT_ESTIMATED_MINUTES, alias="estimatedMinutes")

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> str:
        return _text(value)

    @field_validator("order_index", mode="before")
    @classmethod
    def parse_order_index(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            return 0
        return value

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def parse_minutes(cls, value: Any) -> int:
        return _minutes(value)

    def to_row(self, class_id: Any) -> dict[str, Any]:
        """Return the row shape stored in the ``topics`` table.

        Args:
            class_id: Class the topic belongs to.
        """
        return {
            "class_id": class_id,
            "title": self.title,
            "description": self.description,
            "order_index": self.order_index,
            "estimated_minutes": self.estimated_minutes,
        }


class AssignmentDraft(BaseModel):
    """An assignment extracted from a syllabus, not yet persisted.

    ``due_date`` is kept as an ISO date string; an unparseable due date is
    dropped rather than failing the assignment.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    type: str = DEFAULT_ASSIGNMENT_TYPE
    due_date: Optional[str] = Field(default=None, alias="dueDate")
    estimated_minutes: int = Field(default=DEFAULT_ESTIMATED_MINUTES, alias="estimatedMinutes")

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value: Any) -> str:
        return _text(value)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: Any) -> str:
        assignment_type = _text(value).lower() or DEFAULT_ASSIGNMENT_TYPE
        if assignment_type not in ASSIGNMENT_TYPES:
            logger.info("Unknown assignment type %r", assignment_type)
        return assignment_type

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        try:
            return parse_iso_date(value).isoformat()
        except ValueError:
            logger.warning("Ignoring unparseable due date %r", value)
            return None

    @field_validator("estimated_minutes", mode="before")
    @classmethod
    def parse_minutes(cls, value: Any) -> int:
        return _minutes(value)

    def to_row(self, class_id: Any) -> dict[str, Any]:
        """Return the row shape stored in the ``assignments`` table.

        Args:
            class_id: Class the assignment belongs to.
        """
        return {
            "class_id": class_id,
            "title": self.title,
            "type": self.type,
            "due_date": self.due_date,
            "estimated_minutes": self.estimated_minutes,
        }

    def to_planner_payload(self) -> dict[str, Any]:
        """Shape sent to the AI planner; list position is the planner index."""
        return self.model_dump(by_alias=True)
