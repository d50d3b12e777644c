"""Combination of class meetings and planner sessions into study blocks."""

import logging
from collections.abc import Mapping, Sequence
from datetime import date, time
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from .errors import StructuralInputError
from .models import BlockKind, ClassMeeting, PlannedSession, StudyBlock

logger = logging.getLogger(__name__)


def _require_sequence(name: str, value: object) -> Sequence:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise StructuralInputError(name, value)
    return value


def resolve_assignment_id(
    resolved_assignments: Sequence[Any],
    index: Optional[int],
) -> Any:
    """Translate a planner assignment index into a persisted assignment id.

    Args:
        resolved_assignments: Persisted records in the order the planner saw them.
        index: Zero-based index reported by the planner.

    Returns:
        The record's ``id``, or None when the index cannot be resolved.
    """
    if (
        isinstance(index, bool)
        or not isinstance(index, int)
        or not 0 <= index < len(resolved_assignments)
    ):
        logger.warning(
            "Planner assignment index %r does not match any of %d assignments",
            index, len(resolved_assignments),
        )
        return None

    record = resolved_assignments[index]
    if isinstance(record, Mapping):
        return record.get("id")
    return getattr(record, "id", None)


def merge(
    class_meetings: Sequence[ClassMeeting],
    planned_sessions: Sequence[Any],
    resolved_assignments: Sequence[Any],
    class_id: Any,
    user_id: Any,
) -> list[StudyBlock]:
    """Combine class meetings and planned study sessions into study blocks.

    The result is the class meetings in their given order followed by the
    planned sessions in theirs. Blocks are neither sorted nor
    de-duplicated: a study session coinciding with a class meeting is kept
    alongside it. Use :func:`sort_chronologically` for date order.

    Planned sessions may be :class:`PlannedSession` objects or raw planner
    mappings. A session whose date cannot be parsed is dropped; one whose
    assignment index cannot be resolved is kept without an assignment link.
    Items of ``class_meetings`` that are not :class:`ClassMeeting` objects
    are dropped as well.

    Args:
        class_meetings: Output of the recurrence generator.
        planned_sessions: Sessions proposed by the external planner.
        resolved_assignments: Persisted assignments, index-aligned with the
            list sent to the planner. Items are mappings or objects with ``id``.
        class_id: Class owning every block.
        user_id: User owning every block.

    Returns:
        The merged study blocks.

    Raises:
        StructuralInputError: If any of the three collections is not a sequence.
    """
    _require_sequence("class_meetings", class_meetings)
    _require_sequence("planned_sessions", planned_sessions)
    _require_sequence("resolved_assignments", resolved_assignments)

    blocks: list[StudyBlock] = []
    dropped = 0
    for meeting in class_meetings:
        if not isinstance(meeting, ClassMeeting):
            logger.warning("Dropping class meeting of type %s", type(meeting).__name__)
            dropped += 1
            continue
        blocks.append(
            StudyBlock(
                kind=BlockKind.CLASS_MEETING,
                user_id=user_id,
                class_id=class_id,
                block_date=meeting.block_date,
                start_time=meeting.start_time,
                duration_minutes=meeting.duration_minutes,
            )
        )
    meeting_count = len(blocks)

    for entry in planned_sessions:
        if isinstance(entry, Mapping):
            try:
                entry = PlannedSession.model_validate(entry)
            except ValidationError:
                logger.warning(
                    "Dropping planned session with unparseable date %r",
                    entry.get("blockDate"),
                )
                dropped += 1
                continue
        elif not isinstance(entry, PlannedSession):
            logger.warning("Dropping planned session of type %s", type(entry).__name__)
            dropped += 1
            continue

        blocks.append(
            StudyBlock(
                kind=BlockKind.ASSIGNMENT_SESSION,
                user_id=user_id,
                class_id=class_id,
                block_date=entry.block_date,
                start_time=entry.start_time,
                duration_minutes=entry.duration_minutes,
                assignment_id=resolve_assignment_id(
                    resolved_assignments, entry.assignment_index
                ),
            )
        )

    logger.info(
        "Merged %d study blocks (%d class meetings, %d assignment sessions, %d dropped)",
        len(blocks), meeting_count, len(blocks) - meeting_count, dropped,
    )
    return blocks


def sort_chronologically(blocks: Iterable[StudyBlock]) -> list[StudyBlock]:
    """Order blocks by date, then start time; untimed blocks end their day."""
    return sorted(
        blocks,
        key=lambda block: (
            block.block_date,
            block.start_time is None,
            block.start_time or time.min,
        ),
    )


def group_by_date(blocks: Iterable[StudyBlock]) -> dict[date, list[StudyBlock]]:
    """Group blocks per calendar day, in chronological order."""
    grouped: dict[date, list[StudyBlock]] = {}
    for block in sort_chronologically(blocks):
        grouped.setdefault(block.block_date, []).append(block)
    return grouped
