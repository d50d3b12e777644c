"""Derivation of calendar study blocks from syllabus schedule data."""

from .errors import ScheduleError, StructuralInputError
from .merger import group_by_date, merge, sort_chronologically
from .models import (
    AssignmentRecord,
    BlockKind,
    ClassMeeting,
    PlannedSession,
    StudyBlock,
    WeeklySchedule,
)
from .recurrence import default_term_range, generate

__all__ = [
    "AssignmentRecord",
    "BlockKind",
    "ClassMeeting",
    "PlannedSession",
    "ScheduleError",
    "StructuralInputError",
    "StudyBlock",
    "WeeklySchedule",
    "default_term_range",
    "generate",
    "group_by_date",
    "merge",
    "sort_chronologically",
]
