"""Custom exceptions for ganttr."""

from __future__ import annotations


class GanttrError(Exception):
    """Base exception for all ganttr errors."""

    pass


class ValidationError(GanttrError, ValueError):
    """Raised when an edit is rejected before it is committed."""

    pass


class InvalidDateError(ValidationError):
    """Raised when a date string is not a valid YYYY-MM-DD calendar date."""

    pass


class InvalidDateRangeError(ValidationError):
    """Raised when a start date falls after its end date."""

    pass


class DerivedFieldError(ValidationError):
    """Raised on a direct edit of a field the rollup owns."""

    pass


class CircularDependencyError(ValidationError):
    """Raised when a new dependency edge would close a loop."""

    def __init__(self, task_id: int, dependency_id: int, message: str | None = None):
        self.task_id = task_id
        self.dependency_id = dependency_id
        super().__init__(
            message
            or f"Task {dependency_id} already depends on task {task_id}; "
            f"adding it as a dependency would create a cycle"
        )


class HierarchyCycleError(ValidationError):
    """Raised when the parent relation is not a forest."""

    pass


class TaskNotFoundError(GanttrError, LookupError):
    """Raised when a referenced task id does not exist."""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")

    def __str__(self) -> str:
        return self.args[0]
