"""End-to-end syllabus ingestion: parse, generate, plan, merge, persist."""

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional

import httpx

from scheduler import merge
from scheduler.models import BlockKind, StudyBlock
from scheduler.recurrence import TermRange, default_term_range, generate
from .errors import ExtractionError, GatewayError, IngestionError, PipelineTimeout
from .extraction import coerce_plan, coerce_syllabus, extract_json
from .gateway import GatewayClient
from .store import StudyStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionRequest:
    """Parameters of one syllabus ingestion."""

    syllabus_path: str
    class_id: Any
    user_id: Any
    weekday_hours: float = 2
    weekend_hours: float = 4


@dataclass(frozen=True)
class IngestionSummary:
    """Counts reported back to the client after ingestion."""

    topics_count: int
    assignments_count: int
    study_blocks_count: int
    class_meeting_blocks_count: int
    assignment_blocks_count: int
    total_minutes: int

    def to_dict(self) -> dict[str, Any]:
        """Return the response body sent to the client, with camelCase keys."""
        return {
            "success": True,
            "topicsCount": self.topics_count,
            "assignmentsCount": self.assignments_count,
            "studyBlocksCount": self.study_blocks_count,
            "classMeetingBlocksCount": self.class_meeting_blocks_count,
            "assignmentBlocksCount": self.assignment_blocks_count,
            "totalMinutes": self.total_minutes,
        }


class SyllabusPipeline:
    """Runs one syllabus through the gateway and into storage.

    The steps run sequentially. The two gateway calls are the only slow
    steps, so the optional deadline is checked around them and the time
    left is passed to each call as its request timeout.
    """

    def __init__(
        self,
        gateway: GatewayClient,
        store: StudyStore,
        *,
        default_term: TermRange = default_term_range,
        timeout: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the pipeline.

        Args:
            gateway: Client for the AI parsing and planning calls.
            store: Backend persistence collaborator.
            default_term: Date range used when the syllabus names none.
            timeout: Overall budget in seconds for one run (None: unbounded).
            clock: Monotonic clock, replaceable for tests.
        """
        self._gateway = gateway
        self._store = store
        self._default_term = default_term
        self._timeout = timeout
        self._clock = clock

    def _check_deadline(self, deadline: Optional[float], step: str) -> Optional[float]:
        """Return the seconds left before ``deadline`` (None when unbounded).

        Raises:
            PipelineTimeout: If the deadline has passed.
        """
        if deadline is None:
            return None
        remaining = deadline - self._clock()
        if remaining <= 0:
            raise PipelineTimeout(f"Syllabus ingestion timed out during {step}")
        return remaining

    def _plan_sessions(
        self,
        request: IngestionRequest,
        assignments: list[dict],
        deadline: Optional[float],
    ) -> list[Any]:
        """Fetch planner sessions; a failed or garbled plan yields none."""
        remaining = self._check_deadline(deadline, "study planning")
        try:
            text = self._gateway.plan_sessions(
                assignments,
                weekday_hours=request.weekday_hours,
                weekend_hours=request.weekend_hours,
                timeout=remaining,
            )
            return coerce_plan(extract_json(text, expect=list))
        except httpx.TimeoutException as exc:
            if deadline is not None:
                raise PipelineTimeout(
                    "Syllabus ingestion timed out during study planning"
                ) from exc
            logger.warning("Study plan request timed out: %s", exc)
        except GatewayError as exc:
            logger.warning("Study plan request failed: %s", exc)
        except ExtractionError as exc:
            logger.warning("Failed to parse study plan: %s", exc)
        return []

    def run(self, request: IngestionRequest, today: Optional[date] = None) -> IngestionSummary:
        """Ingest one syllabus.

        The remaining time budget is forwarded to each gateway call, so a
        slow gateway is cut off when the deadline passes.

        Args:
            request: What to ingest and for whom.
            today: Reference date for the default term (default: today).

        Returns:
            Counts of what was stored.

        Raises:
            IngestionError: On missing parameters, download or storage failure.
            GatewayError: If the parsing call fails.
            ExtractionError: If the parsing call returns no usable JSON.
            PipelineTimeout: If the run exceeds its timeout.
        """
        if any(
            value is None or value == ""
            for value in (request.syllabus_path, request.class_id, request.user_id)
        ):
            raise IngestionError(
                "Missing required parameters: syllabus_path, class_id, or user_id"
            )

        deadline = None if self._timeout is None else self._clock() + self._timeout
        logger.info(
            "Processing syllabus %s for class %s (user %s)",
            request.syllabus_path, request.class_id, request.user_id,
        )

        try:
            document = self._store.download_syllabus(request.syllabus_path)
        except OSError as exc:
            raise IngestionError(f"Failed to download file: {exc}") from exc

        remaining = self._check_deadline(deadline, "download")
        try:
            text = self._gateway.parse_syllabus(
                document, weekday_hours=request.weekday_hours, timeout=remaining
            )
        except httpx.TimeoutException as exc:
            if deadline is None:
                raise
            raise PipelineTimeout(
                "Syllabus ingestion timed out during syllabus parsing"
            ) from exc
        self._check_deadline(deadline, "syllabus parsing")


        parsed = coerce_syllabus(extract_json(text, expect=dict))

        try:
            if parsed.topics:
                self._store.insert_topics([t.to_row(request.class_id) for t in parsed.topics])
            resolved = []
            if parsed.assignments:
                resolved = self._store.insert_assignments(
                    [a.to_row(request.class_id) for a in parsed.assignments]
                )
        except Exception as exc:
            raise IngestionError(f"Failed to save syllabus content: {exc}") from exc

        meetings = generate(
            parsed.schedule,
            request.class_id,
            default_term=self._default_term,
            today=today,
        )

        sessions: list[Any] = []
        if parsed.assignments:
            sessions = self._plan_sessions(
                request,
                [a.to_planner_payload() for a in parsed.assignments],
                deadline,
            )
            self._check_deadline(deadline, "study planning")

        blocks: list[StudyBlock] = merge(
            meetings, sessions, resolved, request.class_id, request.user_id
        )

        try:
            if blocks:
                self._store.insert_study_blocks([block.to_record() for block in blocks])
            self._store.mark_class_parsed(request.class_id, parsed.total_minutes)
        except Exception as exc:
            raise IngestionError(f"Failed to save study blocks: {exc}") from exc

        summary = IngestionSummary(
            topics_count=len(parsed.topics),
            assignments_count=len(parsed.assignments),
            study_blocks_count=len(blocks),
            class_meeting_blocks_count=len(meetings),
            assignment_blocks_count=sum(
                1 for block in blocks if block.kind is BlockKind.ASSIGNMENT_SESSION
            ),
            total_minutes=parsed.total_minutes,
        )
        logger.info(
            "Syllabus parsing complete: %d study blocks (%d class meetings, %d sessions)",
            summary.study_blocks_count,
            summary.class_meeting_blocks_count,
            summary.assignment_blocks_count,
        )
        return summary
