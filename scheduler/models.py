"""Data models for weekly schedules and study blocks."""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .timeutils import (
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    clamp_duration,
    parse_clock,
    parse_iso_date,
)

logger = logging.getLogger(__name__)

DEFAULT_SESSION_MINUTES = 60


class BlockKind(str, Enum):
    """Tag distinguishing the two kinds of study block."""

    CLASS_MEETING = "class_meeting"
    ASSIGNMENT_SESSION = "assignment_session"


@dataclass(frozen=True)
class WeeklySchedule:
    """Recurring class meeting pattern as extracted from a syllabus.

    Day tokens and times are kept as received; the recurrence generator
    resolves them and treats anything unusable as "no schedule".
    """

    days: tuple[str, ...]
    start_time: str
    end_time: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class ClassMeeting:
    """One concrete occurrence of a weekly class meeting."""

    block_date: date
    start_time: time
    duration_minutes: int
    class_id: Any

    def __post_init__(self) -> None:
        if not MIN_DURATION_MINUTES <= self.duration_minutes <= MAX_DURATION_MINUTES:
            raise ValueError(
                f"Duration must be {MIN_DURATION_MINUTES}-{MAX_DURATION_MINUTES} "
                f"minutes, got {self.duration_minutes}"
            )


class PlannedSession(BaseModel):
    """A study session proposed by the external planner.

    Built from the planner's camelCase JSON. Only the date is mandatory:
    a bad start time becomes None, a bad duration falls back to 60 minutes
    and a bad assignment index to None, so the merger can still keep the
    session.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    block_date: date = Field(alias="blockDate")
    duration_minutes: int = Field(default=DEFAULT_SESSION_MINUTES, alias="durationMinutes")
    assignment_index: Optional[int] = Field(default=None, alias="assignmentIndex")
    start_time: Optional[time] = Field(default=None, alias="startTime")

    @field_validator("block_date", mode="before")
    @classmethod
    def parse_block_date(cls, value: Any) -> date:
        return parse_iso_date(value)

    @field_validator("start_time", mode="before")
    @classmethod
    def parse_start_time(cls, value: Any) -> Optional[time]:
        if value is None or value == "" or isinstance(value, time):
            return value or None
        clock = parse_clock(value)
        if clock is None or clock[0] == 24:
            logger.warning("Ignoring unparseable session start time %r", value)
            return None
        return time(*clock)

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def parse_duration(cls, value: Any) -> int:
        if isinstance(value, float) and math.isfinite(value):
            value = round(value)
        elif isinstance(value, str) and value.strip().isdigit():
            value = int(value.strip())
        if isinstance(value, bool) or not isinstance(value, int):
            logger.warning(
                "Session duration %r is not a number; using %d minutes",
                value, DEFAULT_SESSION_MINUTES,
            )
            return DEFAULT_SESSION_MINUTES
        return clamp_duration(value)

    @field_validator("assignment_index", mode="before")
    @classmethod
    def parse_index(cls, value: Any) -> Optional[int]:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return None


@dataclass
class AssignmentRecord:
    """A persisted assignment, as returned by the storage layer."""

    id: Any
    title: str = ""
    type: str = "reading"
    due_date: Optional[str] = None
    estimated_minutes: int = 60


@dataclass(frozen=True)
class StudyBlock:
    """A calendar study block ready for persistence."""

    kind: BlockKind
    user_id: Any
    class_id: Any
    block_date: date
    duration_minutes: int
    start_time: Optional[time] = None
    assignment_id: Any = field(default=None)

    def __post_init__(self) -> None:
        if not MIN_DURATION_MINUTES <= self.duration_minutes <= MAX_DURATION_MINUTES:
            raise ValueError(
                f"Duration must be {MIN_DURATION_MINUTES}-{MAX_DURATION_MINUTES} "
                f"minutes, got {self.duration_minutes}"
            )
        if self.kind is BlockKind.CLASS_MEETING and self.assignment_id is not None:
            raise ValueError("Class meeting blocks cannot link to an assignment")

    def to_record(self) -> dict[str, Any]:
        """Return the row shape stored in the ``study_blocks`` table."""
        return {
            "user_id": self.user_id,
            "class_id": self.class_id,
            "assignment_id": self.assignment_id,
            "block_date": self.block_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "duration_minutes": self.duration_minutes,
        }
