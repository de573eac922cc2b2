"""Tests for hierarchical progress roll-up."""

from celebrationpro.hierarchy.engine import EventTaskHierarchy
from celebrationpro.hierarchy.models import TaskStatus


def _add(h: EventTaskHierarchy, task_id: str, parent: str | None = None, done=False):
    task = h.create_task(
        {
            "id": task_id,
            "name": task_id,
            "module_id": "m",
            "assigned_to": "team",
            "parent_task_id": parent,
        }
    )
    if done:
        task.status = TaskStatus.completed
    return task


class TestLeafProgress:
    def test_unknown_task_is_zero(self, hierarchy: EventTaskHierarchy):
        assert hierarchy.get_task_progress("ghost") == 0

    def test_completed_leaf(self, hierarchy: EventTaskHierarchy):
        _add(hierarchy, "a", done=True)
        assert hierarchy.get_task_progress("a") == 100

    def test_unfinished_leaf_statuses(self, hierarchy: EventTaskHierarchy):
        task = _add(hierarchy, "a")
        for status in (TaskStatus.pending, TaskStatus.in_progress, TaskStatus.blocked):
            task.status = status
            assert hierarchy.get_task_progress("a") == 0

    def test_hours_are_ignored(self, hierarchy: EventTaskHierarchy):
        task = _add(hierarchy, "a")
        task.estimated_hours = 4
        task.actual_hours = 4
        assert hierarchy.get_task_progress("a") == 0


class TestRollUp:
    def test_half_done(self, hierarchy: EventTaskHierarchy):
        _add(hierarchy, "p")
        _add(hierarchy, "c1", "p", done=True)
        _add(hierarchy, "c2", "p")
        assert hierarchy.get_task_progress("p") == 50

    def test_parent_status_ignored_when_it_has_subtasks(
        self, hierarchy: EventTaskHierarchy
    ):
        _add(hierarchy, "p", done=True)
        _add(hierarchy, "c", "p")
        assert hierarchy.get_task_progress("p") == 0

    def test_direct_children_weigh_equally(self, hierarchy: EventTaskHierarchy):
        _add(hierarchy, "root")
        _add(hierarchy, "big", "root")
        _add(hierarchy, "big_1", "big", done=True)
        _add(hierarchy, "big_2", "big", done=True)
        _add(hierarchy, "big_3", "big", done=True)
        _add(hierarchy, "big_4", "big")
        _add(hierarchy, "small", "root")
        # big = 75, small = 0
        assert hierarchy.get_task_progress("big") == 75
        assert hierarchy.get_task_progress("root") == 37.5

    def test_duplicate_subtask_entries_count_twice(
        self, hierarchy: EventTaskHierarchy
    ):
        _add(hierarchy, "p")
        _add(hierarchy, "a", "p", done=True)
        _add(hierarchy, "b", "p")
        hierarchy.create_task(
            {
                "id": "a",
                "name": "a again",
                "module_id": "m",
                "assigned_to": "team",
                "parent_task_id": "p",
            }
        ).status = TaskStatus.completed
        assert hierarchy.get_task("p").subtasks == ["a", "b", "a"]
        assert round(hierarchy.get_task_progress("p"), 6) == round(200 / 3, 6)

    def test_dangling_subtask_counts_as_zero(self, hierarchy: EventTaskHierarchy):
        parent = _add(hierarchy, "p")
        _add(hierarchy, "a", "p", done=True)
        parent.subtasks.append("ghost")
        assert hierarchy.get_task_progress("p") == 50

    def test_wedding_parent(self, wedding: EventTaskHierarchy):
        assert wedding.get_task_progress("dec_001") == 0
        wedding.get_task("dec_002").status = TaskStatus.completed
        assert wedding.get_task_progress("dec_001") == 100

    def test_deep_chain_does_not_overflow(self, hierarchy: EventTaskHierarchy):
        _add(hierarchy, "n0")
        for i in range(1, 5000):
            _add(hierarchy, f"n{i}", f"n{i - 1}")
        hierarchy.get_task("n4999").status = TaskStatus.completed
        assert hierarchy.get_task_progress("n0") == 100


class TestContainmentCycles:
    def test_self_parent_terminates(self, hierarchy: EventTaskHierarchy):
        _add(hierarchy, "a", "a")
        assert hierarchy.get_task("a").subtasks == ["a"]
        assert hierarchy.get_task_progress("a") == 0

    def test_two_node_cycle_terminates(self, hierarchy: EventTaskHierarchy):
        a = _add(hierarchy, "a")
        _add(hierarchy, "b", "a")
        c = _add(hierarchy, "c", "a", done=True)
        hierarchy.get_task("b").subtasks.append("a")
        assert a.subtasks == ["b", "c"]
        assert c.status == TaskStatus.completed
        # b's only child is the ancestor a, which counts as 0
        assert hierarchy.get_task_progress("a") == 50
