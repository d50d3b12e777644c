"""Ingestion of AI-parsed syllabi into stored study blocks."""

from .config import GatewaySettings
from .errors import ExtractionError, GatewayError, IngestionError, PipelineTimeout
from .extraction import ParsedSyllabus, coerce_plan, coerce_syllabus, extract_json
from .gateway import GatewayClient
from .pipeline import IngestionRequest, IngestionSummary, SyllabusPipeline
from .schemas import AssignmentDraft, ScheduleSchema, Topic
from .store import InMemoryStore, StudyStore

__all__ = [
    "AssignmentDraft",
    "ExtractionError",
    "GatewayClient",
    "GatewayError",
    "GatewaySettings",
    "InMemoryStore",
    "IngestionError",
    "IngestionRequest",
    "IngestionSummary",
    "ParsedSyllabus",
    "PipelineTimeout",
    "ScheduleSchema",
    "StudyStore",
    "SyllabusPipeline",
    "Topic",
    "coerce_plan",
    "coerce_syllabus",
    "extract_json",
]
