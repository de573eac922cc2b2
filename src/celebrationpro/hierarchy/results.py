"""Result and error types for graph mutations.

The engine never raises for a missing reference or a cycle on its own.
Callers that want strict behaviour inspect the returned ``LinkResult`` or
call ``raise_for_status()`` on it.
"""

from dataclasses import dataclass, field
from enum import StrEnum


class TaskGraphError(ValueError):
    """Base class for task graph validation errors."""


class TaskNotFoundError(TaskGraphError):
    """Raised when an operation references a task id that does not exist."""

    def __init__(self, task_ids: list[str]) -> None:
        self.task_ids = task_ids
        super().__init__(f"Unknown task(s): {', '.join(task_ids)}")


class DependencyCycleError(TaskGraphError):
    """Raised when a dependency edge would close a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")


class LinkStatus(StrEnum):
    success = "success"
    not_found = "not_found"
    cycle_detected = "cycle_detected"


@dataclass
class LinkResult:
    """Outcome of a dependency registration."""

    status: LinkStatus
    task_id: str
    depends_on_task_id: str
    missing: list[str] = field(default_factory=list)
    cycle: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == LinkStatus.success

    def __bool__(self) -> bool:
        return self.ok

    def raise_for_status(self) -> None:
        """Raise the matching TaskGraphError unless the link succeeded."""
        if self.status == LinkStatus.not_found:
            raise TaskNotFoundError(self.missing)
        if self.status == LinkStatus.cycle_detected:
            raise DependencyCycleError(self.cycle)
