"""Exceptions raised by the schedule core."""


class ScheduleError(Exception):
    """Base class for schedule derivation errors."""


class StructuralInputError(ScheduleError, TypeError):
    """Raised when an argument that must be a sequence is something else."""

    def __init__(self, name: str, value: object) -> None:
        super().__init__(
            f"{name} must be a sequence, got {type(value).__name__}"
        )
        self.name = name
