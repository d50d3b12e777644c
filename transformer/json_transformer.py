"""JSON transformer producing ``study_blocks`` rows."""

import json
from typing import Any, Optional

from scheduler.models import StudyBlock
from .base import BaseTransformer


class JsonTransformer(BaseTransformer):
    """Transformer that renders study blocks as persistence records."""

    def __init__(self, indent: Optional[int] = 2) -> None:
        """Initialize the transformer.

        Args:
            indent: JSON indentation passed to ``json.dump`` (None: compact).
        """
        self._records: Optional[list[dict[str, Any]]] = None
        self._indent = indent

    def transform(self, blocks: list[StudyBlock]) -> list[dict[str, Any]]:
        """Convert study blocks to ``study_blocks`` rows.

        Args:
            blocks: Blocks to render, in output order.

        Returns:
            One record per block, as produced by ``StudyBlock.to_record``.
        """
        self._records = [block.to_record() for block in blocks]
        return self._records

    def save(self, output_path: str) -> None:
        """Write the records as a JSON array.

        Raises:
            RuntimeError: If transform() hasn't been called yet.
        """
        if self._records is None:
            raise RuntimeError("No records. Call transform() first.")

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self._records, f, indent=self._indent, default=str)
            f.write("\n")
