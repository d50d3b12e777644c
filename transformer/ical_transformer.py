"""iCalendar transformer for study blocks."""

import hashlib
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo

from icalendar import Calendar, Event

from scheduler.models import BlockKind, StudyBlock
from .base import BaseTransformer


class ICalTransformer(BaseTransformer):
    """Transformer that converts study blocks to iCalendar format."""

    DEFAULT_TIMEZONE = "UTC"
    UID_DOMAIN = "syllabus2cal"
    SUMMARY_CODES = {
        BlockKind.CLASS_MEETING: "Class",
        BlockKind.ASSIGNMENT_SESSION: "Study",
    }

    def __init__(
        self,
        class_name: str = "Class",
        assignment_titles: Optional[Mapping[Any, str]] = None,
        timezone: str = DEFAULT_TIMEZONE,
    ) -> None:
        """Initialize the iCalendar transformer.

        Args:
            class_name: Display name of the class the blocks belong to.
            assignment_titles: Assignment id to title, used for study sessions.
            timezone: IANA zone the block times are expressed in.
        """
        self._calendar: Optional[Calendar] = None
        self._class_name = class_name
        self._assignment_titles = dict(assignment_titles or {})
        self._timezone_name = timezone
        self._timezone = ZoneInfo(timezone)

    def _generate_uid(self, block: StudyBlock, position: int) -> str:
        """Generate a unique identifier for a block.

        Blocks are not de-duplicated, so the position keeps identical
        blocks apart.
        """
        unique_string = (
            f"{block.kind.value}-{block.class_id}-{block.assignment_id}-"
            f"{block.block_date}-{block.start_time}-{position}"
        )
        return hashlib.md5(unique_string.encode()).hexdigest() + f"@{self.UID_DOMAIN}"

    def _summary(self, block: StudyBlock) -> str:
        code = self.SUMMARY_CODES[block.kind]
        title = self._class_name
        if block.kind is BlockKind.ASSIGNMENT_SESSION:
            title = self._assignment_titles.get(block.assignment_id, self._class_name)
        return f"[{code}] {title}"

    def transform(self, blocks: list[StudyBlock]) -> Calendar:
        """Transform study blocks into iCalendar format.

        Blocks without a start time become all-day events.

        Args:
            blocks: Study blocks to transform.

        Returns:
            iCalendar Calendar object.
        """
        self._calendar = Calendar()
        self._calendar.add("prodid", "-//Syllabus to iCal//syllabus2cal//EN")
        self._calendar.add("version", "2.0")
        self._calendar.add("calscale", "GREGORIAN")
        self._calendar.add("method", "PUBLISH")
        self._calendar.add("x-wr-calname", self._class_name)
        self._calendar.add("x-wr-timezone", self._timezone_name)

        stamp = datetime.now(self._timezone)
        for position, block in enumerate(blocks):
            ical_event = Event()
            ical_event.add("uid", self._generate_uid(block, position))
            ical_event.add("dtstamp", stamp)
            ical_event.add("summary", self._summary(block))

            if block.start_time is not None:
                start_datetime = datetime.combine(
                    block.block_date,
                    block.start_time,
                    tzinfo=self._timezone
                )
                ical_event.add("dtstart", start_datetime)
                ical_event.add(
                    "dtend",
                    start_datetime + timedelta(minutes=block.duration_minutes)
                )
            else:
                ical_event.add("dtstart", block.block_date)
                ical_event.add("dtend", block.block_date + timedelta(days=1))

            ical_event.add("description", f"{block.duration_minutes} min")
            ical_event.add("categories", [block.kind.value])

            self._calendar.add_component(ical_event)

        return self._calendar

    def save(self, output_path: str) -> None:
        """Save the calendar to an .ics file.

        Args:
            output_path: Path to the output file.

        Raises:
            RuntimeError: If transform() hasn't been called yet.
        """
        if self._calendar is None:
            raise RuntimeError("No calendar data. Call transform() first.")

        with open(output_path, "wb") as f:
            f.write(self._calendar.to_ical())
