"""PlanSource abstract base class definition."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from celebrationpro.hierarchy.engine import EventTaskHierarchy
from celebrationpro.hierarchy.models import TaskStatus
from celebrationpro.hierarchy.results import TaskGraphError


class PlanFormatError(TaskGraphError):
    """Raised when a plan file cannot be parsed into tasks."""


@dataclass
class PlanEntry:
    """One task as read from a plan file, before it enters the hierarchy."""

    record: dict[str, Any]
    depends_on: list[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.pending
    actual_hours: float = 0

    @property
    def task_id(self) -> str:
        return self.record["id"]


class PlanSource(ABC):
    """Base class for event plan backends.

    A source reads task entries from somewhere and can write a status
    change back. ``load()`` replays the entries into a fresh hierarchy:
    all tasks first (in file order), then dependency edges, then statuses.

    Subclasses should define ``source_name`` and implement ``can_handle``
    to participate in auto-detection via ``detect_source()``.
    """

    source_name: str = ""

    @classmethod
    # root is needed by subclass overrides but unused in the default impl
    def can_handle(cls, root: Path) -> bool:  # noqa: ARG003
        """Return True if this source can provide a plan for the directory.

        The default returns False (opt-in).
        """
        return False

    @classmethod
    @abstractmethod
    def create(cls, root: Path) -> "PlanSource":
        """Create an instance for the plan file found in root."""
        ...

    @abstractmethod
    def get_entries(self) -> list[PlanEntry]:
        """Return all task entries from this source."""
        ...

    @abstractmethod
    def update_status(self, task_id: str, status: TaskStatus) -> bool:
        """Persist a new status. Returns True if the task was found."""
        ...

    def load(self) -> EventTaskHierarchy:
        """Build a hierarchy from this source's entries."""
        entries = self.get_entries()
        hierarchy = EventTaskHierarchy()

        for entry in entries:
            hierarchy.create_task(entry.record)

        for entry in entries:
            for dep_id in entry.depends_on:
                hierarchy.add_dependency(entry.task_id, dep_id)

        for entry in entries:
            task = hierarchy.get_task(entry.task_id)
            if task is not None:
                task.status = entry.status
                task.actual_hours = entry.actual_hours

        return hierarchy
