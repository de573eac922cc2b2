"""Tests for TaskStatus transitions and the Task model."""

import pytest

from celebrationpro.hierarchy.models import TaskPriority, TaskStatus
from celebrationpro.hierarchy.status import is_terminal, next_status, valid_transition


class TestValidTransition:
    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (TaskStatus.pending, TaskStatus.in_progress),
            (TaskStatus.in_progress, TaskStatus.completed),
            (TaskStatus.pending, TaskStatus.blocked),
            (TaskStatus.in_progress, TaskStatus.blocked),
            (TaskStatus.blocked, TaskStatus.pending),
            (TaskStatus.blocked, TaskStatus.in_progress),
        ],
    )
    def test_allowed(self, current: TaskStatus, target: TaskStatus):
        assert valid_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (TaskStatus.pending, TaskStatus.completed),
            (TaskStatus.completed, TaskStatus.pending),
            (TaskStatus.completed, TaskStatus.blocked),
            (TaskStatus.blocked, TaskStatus.completed),
            (TaskStatus.pending, TaskStatus.pending),
        ],
    )
    def test_rejected(self, current: TaskStatus, target: TaskStatus):
        assert not valid_transition(current, target)


class TestProgression:
    def test_next_status(self):
        assert next_status(TaskStatus.pending) == TaskStatus.in_progress
        assert next_status(TaskStatus.in_progress) == TaskStatus.completed
        assert next_status(TaskStatus.completed) is None
        assert next_status(TaskStatus.blocked) is None

    def test_terminal(self):
        assert is_terminal(TaskStatus.completed)
        assert not is_terminal(TaskStatus.blocked)
        assert not is_terminal(TaskStatus.pending)


class TestTaskModel:
    def test_enum_values(self):
        assert set(TaskStatus) == {"pending", "in_progress", "completed", "blocked"}
        assert set(TaskPriority) == {"low", "medium", "high", "critical"}
