"""Abstract base class for study block transformers."""

from abc import ABC, abstractmethod
from typing import Any

from scheduler.models import StudyBlock


class BaseTransformer(ABC):
    """Abstract base class defining the interface for study block transformers.

    Extend this class to implement transformers for different output formats
    (e.g., iCalendar, JSON rows for bulk insert, etc.).
    """

    @abstractmethod
    def transform(self, blocks: list[StudyBlock]) -> Any:
        """Transform study blocks into the target format.

        Args:
            blocks: Study blocks to transform.

        Returns:
            Transformed data in the target format.
        """
        pass

    @abstractmethod
    def save(self, output_path: str) -> None:
        """Save the transformed data to a file.

        Args:
            output_path: Path to the output file.
        """
        pass
