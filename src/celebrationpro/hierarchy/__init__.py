"""Event task hierarchy: task tree, dependency graph and derived views."""

from celebrationpro.hierarchy.engine import EventTaskHierarchy
from celebrationpro.hierarchy.models import (
    EVENT_ID_KEY,
    Task,
    TaskPriority,
    TaskStatus,
)
from celebrationpro.hierarchy.results import (
    DependencyCycleError,
    LinkResult,
    LinkStatus,
    TaskGraphError,
    TaskNotFoundError,
)
from celebrationpro.hierarchy.status import is_terminal, next_status, valid_transition

__all__ = [
    "EVENT_ID_KEY",
    "DependencyCycleError",
    "EventTaskHierarchy",
    "LinkResult",
    "LinkStatus",
    "Task",
    "TaskGraphError",
    "TaskNotFoundError",
    "TaskPriority",
    "TaskStatus",
    "is_terminal",
    "next_status",
    "valid_transition",
]
