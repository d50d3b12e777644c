"""Parsing and range rules for clock times, dates and block durations."""

import logging
import re
from datetime import date, datetime
from typing import Optional

logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 4 * 60

_CLOCK_PART = re.compile(r"\d+", re.ASCII)


def parse_clock(value: object) -> Optional[tuple[int, int]]:
    """Parse an ``HH:mm`` string into ``(hour, minute)``.

    Anything after the minute component (e.g. seconds) is ignored.
    ``24:00`` is accepted as the end of the day.

    Returns:
        The parsed pair, or None if the value is not a usable time.
    """
    if not isinstance(value, str):
        return None

    parts = value.split(":")
    if len(parts) < 2:
        return None

    hour_str, minute_str = parts[0].strip(), parts[1].strip()
    if not _CLOCK_PART.fullmatch(hour_str) or not _CLOCK_PART.fullmatch(minute_str):
        return None

    hour, minute = int(hour_str), int(minute_str)
    if minute > 59 or hour > 24 or (hour == 24 and minute != 0):
        return None
    return hour, minute


def parse_iso_date(value: object) -> date:
    """Read a ``YYYY-MM-DD`` value; a trailing time part is ignored.

    Raises:
        ValueError: If the value is not a date or an ISO date string.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {type(value).__name__}")
    return date.fromisoformat(value.strip()[:10])


def clamp_duration(minutes: int) -> int:
    """Clamp a block duration into the allowed range."""
    if minutes < MIN_DURATION_MINUTES:
        logger.warning(
            "Duration too short (%d min); raising to %d minutes",
            minutes, MIN_DURATION_MINUTES,
        )
        return MIN_DURATION_MINUTES
    if minutes > MAX_DURATION_MINUTES:
        logger.warning(
            "Duration too long (%d min); capping at %d minutes",
            minutes, MAX_DURATION_MINUTES,
        )
        return MAX_DURATION_MINUTES
    return minutes
