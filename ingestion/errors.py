"""Exceptions raised while ingesting a syllabus."""


class IngestionError(Exception):
    """Raised when a syllabus cannot be ingested."""


class ExtractionError(IngestionError, ValueError):
    """Raised when an AI response does not contain usable JSON."""


class GatewayError(IngestionError):
    """Raised when the AI gateway answers with an error status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        super().__init__(f"AI gateway error: {status_code}")
        self.status_code = status_code
        self.detail = detail


class PipelineTimeout(IngestionError, TimeoutError):
    """Raised when an ingestion run exceeds its deadline."""
