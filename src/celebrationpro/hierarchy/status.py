"""TaskStatus transition validation."""

from .models import TaskStatus

# Valid transitions: status -> set of statuses it can move to.
# BLOCKED is reachable from any non-terminal status.
_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.pending: {TaskStatus.in_progress, TaskStatus.blocked},
    TaskStatus.in_progress: {TaskStatus.completed, TaskStatus.blocked},
    TaskStatus.blocked: {TaskStatus.pending, TaskStatus.in_progress},
    TaskStatus.completed: set(),
}

# The linear progression order (excluding blocked)
STATUS_ORDER: list[TaskStatus] = [
    TaskStatus.pending,
    TaskStatus.in_progress,
    TaskStatus.completed,
]


def valid_transition(current: TaskStatus, target: TaskStatus) -> bool:
    """Check if moving a task from current to target is allowed."""
    return target in _TRANSITIONS.get(current, set())


def next_status(current: TaskStatus) -> TaskStatus | None:
    """Return the next status in the linear progression, or None."""
    try:
        idx = STATUS_ORDER.index(current)
    except ValueError:
        return None
    if idx + 1 < len(STATUS_ORDER):
        return STATUS_ORDER[idx + 1]
    return None


def is_terminal(status: TaskStatus) -> bool:
    """Return True if no further transitions are allowed."""
    return not _TRANSITIONS.get(status)
