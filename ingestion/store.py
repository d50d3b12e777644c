"""Storage collaborator used by the ingestion pipeline."""

import logging
from pathlib import Path
from typing import Any, Callable, Optional, Protocol
from uuid import uuid4

logger = logging.getLogger(__name__)


class StudyStore(Protocol):
    """Persistence operations the pipeline needs from the backend."""

    def download_syllabus(self, path: str) -> bytes: ...

    def insert_topics(self, rows: list[dict[str, Any]]) -> None: ...

    def insert_assignments(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert assignments and return them, in order, with their ``id``."""
        ...

    def insert_study_blocks(self, rows: list[dict[str, Any]]) -> None: ...

    def mark_class_parsed(self, class_id: Any, total_minutes: int) -> None: ...


class InMemoryStore:
    """Dict-backed :class:`StudyStore` for local runs and tests.

    Syllabi are read from ``files`` first and then, when ``root`` is set,
    from disk below it.
    """

    def __init__(
        self,
        files: Optional[dict[str, bytes]] = None,
        root: Optional[Path] = None,
        id_factory: Callable[[], Any] = lambda: str(uuid4()),
    ) -> None:
        self.files = dict(files or {})
        self.root = root
        self.topics: list[dict[str, Any]] = []
        self.assignments: list[dict[str, Any]] = []
        self.study_blocks: list[dict[str, Any]] = []
        self.classes: dict[Any, dict[str, Any]] = {}
        self._id_factory = id_factory

    def download_syllabus(self, path: str) -> bytes:
        if path in self.files:
            return self.files[path]
        if self.root is not None:
            candidate = (self.root / path).resolve()
            if candidate.is_relative_to(self.root.resolve()) and candidate.is_file():
                return candidate.read_bytes()
        raise FileNotFoundError(f"Syllabus not found: {path}")

    def insert_topics(self, rows: list[dict[str, Any]]) -> None:
        self.topics.extend({"id": self._id_factory(), **row} for row in rows)

    def insert_assignments(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        inserted = [{"id": self._id_factory(), **row} for row in rows]
        self.assignments.extend(inserted)
        return inserted

    def insert_study_blocks(self, rows: list[dict[str, Any]]) -> None:
        self.study_blocks.extend({"id": self._id_factory(), **row} for row in rows)
        logger.debug("Stored %d study blocks", len(rows))

    def mark_class_parsed(self, class_id: Any, total_minutes: int) -> None:
        self.classes[class_id] = {
            "ai_parsed": True,
            "estimated_total_minutes": total_minutes,
            "estimated_remaining_minutes": total_minutes,
        }
