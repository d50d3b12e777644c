"""Expansion of weekly class schedules into concrete meeting blocks."""

import logging
from datetime import date, time, timedelta
from typing import Callable, Iterable, Optional

from .models import ClassMeeting, WeeklySchedule
from .timeutils import clamp_duration, parse_clock

logger = logging.getLogger(__name__)

TermRange = Callable[[date], tuple[date, date]]

MINUTES_PER_DAY = 24 * 60

# Weekday numbers run 0 (Sunday) to 6 (Saturday). "S" belongs to Saturday;
# Sunday has no single-letter form.
DAY_NUMBERS: dict[str, int] = {
    "Monday": 1,
    "Tuesday": 2,
    "Wednesday": 3,
    "Thursday": 4,
    "Friday": 5,
    "Saturday": 6,
    "Sunday": 0,
    "Mon": 1,
    "Tue": 2,
    "Wed": 3,
    "Thu": 4,
    "Fri": 5,
    "Sat": 6,
    "Sun": 0,
    "M": 1,
    "T": 2,
    "W": 3,
    "R": 4,
    "F": 5,
    "S": 6,
}

def default_term_range(today: date) -> tuple[date, date]:
    """Fallback term used when the syllabus names no dates.

    Args:
        today: Reference date; only its year is used.

    Returns:
        January 15 to May 15 of the reference year.
    """
    return date(today.year, 1, 15), date(today.year, 5, 15)


def resolve_days(tokens: Iterable[object]) -> frozenset[int]:
    """Map day tokens to weekday numbers, dropping anything unknown.

    A token is looked up as given (after trimming) and then by its first
    three characters, so "Tues" resolves like "Tue".
    """
    days: set[int] = set()
    for token in tokens:
        if not isinstance(token, str):
            continue
        name = token.strip()
        number = DAY_NUMBERS.get(name)
        if number is None:
            number = DAY_NUMBERS.get(name[:3])
        if number is not None:
            days.add(number)
    return frozenset(days)


def meeting_duration(start: tuple[int, int], end: tuple[int, int]) -> int:
    """Minutes from start to end, rolling over midnight when end < start."""
    duration = (end[0] * 60 + end[1]) - (start[0] * 60 + start[1])
    if duration < 0:
        duration += MINUTES_PER_DAY
        logger.warning(
            "End time %02d:%02d is before start time %02d:%02d; assuming the "
            "meeting ends the next day (%d minutes)",
            end[0], end[1], start[0], start[1], duration,
        )
    return duration


def _weekday_number(day: date) -> int:
    """Weekday of ``day`` with Sunday as 0."""
    return (day.weekday() + 1) % 7


def generate(
    schedule: Optional[WeeklySchedule],
    class_id: object,
    *,
    default_term: TermRange = default_term_range,
    today: Optional[date] = None,
) -> list[ClassMeeting]:
    """Expand a weekly schedule into one meeting block per matching date.

    An absent or unusable schedule yields an empty list rather than an
    error, since the syllabus simply did not describe a meeting pattern.

    Args:
        schedule: The weekly pattern, or None if the syllabus had none.
        class_id: Identifier of the class owning the meetings.
        default_term: Supplies the date range when the schedule lacks one.
        today: Reference date for ``default_term`` (default: today).

    Returns:
        Meetings in ascending date order.
    """
    if schedule is None:
        return []

    if not schedule.days or not schedule.start_time or not schedule.end_time:
        logger.info("Schedule is missing days or times; no class meetings generated")
        return []

    start = parse_clock(schedule.start_time)
    end = parse_clock(schedule.end_time)
    if start is None or end is None or start[0] == 24:
        logger.warning(
            "Invalid time format in schedule: %r - %r",
            schedule.start_time, schedule.end_time,
        )
        return []

    days = resolve_days(schedule.days)
    if not days:
        logger.warning("No valid days found in schedule: %r", schedule.days)
        return []

    duration = clamp_duration(meeting_duration(start, end))

    start_date, end_date = schedule.start_date, schedule.end_date
    if start_date is None or end_date is None:
        term_start, term_end = default_term(today or date.today())
        start_date = start_date or term_start
        end_date = end_date or term_end

    if start_date > end_date:
        logger.warning(
            "Schedule starts after it ends (%s > %s); no class meetings generated",
            start_date, end_date,
        )
        return []

    start_time = time(*start)
    meetings: list[ClassMeeting] = []
    # Offsets from start_date so the walk never steps past date.max.
    for offset in range((end_date - start_date).days + 1):
        current = start_date + timedelta(days=offset)
        if _weekday_number(current) in days:
            meetings.append(
                ClassMeeting(
                    block_date=current,
                    start_time=start_time,
                    duration_minutes=duration,
                    class_id=class_id,
                )
            )

    logger.info(
        "Generated %d class meeting blocks of %d minutes",
        len(meetings), duration,
    )
    return meetings
