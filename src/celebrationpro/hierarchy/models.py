"""Task model and enums for the event task hierarchy."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

# Metadata key that tags a task with its owning event
EVENT_ID_KEY = "event_id"


class TaskStatus(StrEnum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    blocked = "blocked"


class TaskPriority(StrEnum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


@dataclass
class Task:
    """A node in both the containment tree and the dependency graph.

    ``dependencies`` lists tasks that must complete before this one may
    start. ``subtasks`` lists child task ids in insertion order.
    """

    id: str
    name: str
    module_id: str
    assigned_to: str
    parent_task_id: str | None = None
    due_date: str | None = None
    status: TaskStatus = TaskStatus.pending
    priority: TaskPriority = TaskPriority.medium
    estimated_hours: float | None = None
    actual_hours: float = 0
    dependencies: list[str] = field(default_factory=list)
    subtasks: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def event_id(self) -> Any:
        return self.metadata.get(EVENT_ID_KEY)

    def is_leaf(self) -> bool:
        return not self.subtasks

