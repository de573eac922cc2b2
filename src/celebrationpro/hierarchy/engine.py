"""EventTaskHierarchy: in-memory task tree and dependency graph.

Tasks are stored in an id-keyed dict. Parent/child and dependency
relations are kept as id lists on each task, plus a reverse dependency
index (task id -> ids of tasks that depend on it).

Mutations never raise for missing references: a missing parent drops the
child link, and an edge with an unknown endpoint is ignored. Dependency
registration returns a ``LinkResult`` so callers can opt into strict
handling. Every traversal is iterative and guarded by a visited set.
"""

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .models import Task, TaskPriority, TaskStatus
from .results import LinkResult, LinkStatus

logger = logging.getLogger(__name__)

_WHITE, _GRAY, _BLACK = 0, 1, 2


@dataclass
class _PathFrame:
    """One level of the longest-path search."""

    task_id: str
    path: list[str]
    pending: Iterator[str]
    best: list[str]


class EventTaskHierarchy:
    """Task hierarchy with dependency tracking for a set of events.

    Usage:
        hierarchy = EventTaskHierarchy()
        hierarchy.create_task({"id": "dec_001", "name": "Stage", ...})
        hierarchy.add_dependency("dec_001", "light_001")
        hierarchy.can_start_task("dec_001")
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._dependents: dict[str, list[str]] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    @property
    def tasks(self) -> list[Task]:
        """All tasks in insertion order."""
        return list(self._tasks.values())

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def get_dependents(self, task_id: str) -> list[str]:
        """Return ids of tasks that registered a dependency on task_id."""
        return list(self._dependents.get(task_id, []))

    # -- mutation -----------------------------------------------------------

    def create_task(self, task_data: Mapping[str, Any]) -> Task:
        """Create a task and link it under its parent when the parent exists.

        An existing task with the same id is replaced wholesale, losing its
        subtask and dependency lists. A parent that does not exist yet is
        remembered on the task but no child link is recorded.
        """
        task = Task(
            id=task_data["id"],
            name=task_data["name"],
            module_id=task_data["module_id"],
            assigned_to=task_data["assigned_to"],
            parent_task_id=task_data.get("parent_task_id") or None,
            due_date=task_data.get("due_date"),
            priority=TaskPriority(task_data.get("priority") or TaskPriority.medium),
            estimated_hours=task_data.get("estimated_hours"),
            metadata=dict(task_data.get("metadata") or {}),
        )

        if task.id in self._tasks:
            logger.debug("Overwriting existing task %s", task.id)
        self._tasks[task.id] = task

        if task.parent_task_id:
            parent = self._tasks.get(task.parent_task_id)
            if parent is not None:
                parent.subtasks.append(task.id)
            else:
                logger.debug(
                    "Parent %s not found for task %s; link dropped",
                    task.parent_task_id,
                    task.id,
                )

        return task

    def add_dependency(
        self,
        task_id: str,
        depends_on_task_id: str,
        *,
        reject_cycles: bool = False,
    ) -> LinkResult:
        """Record that task_id cannot start until depends_on_task_id completes.

        Both tasks must exist, otherwise nothing is recorded and a
        ``not_found`` result is returned. Cycles are accepted unless
        reject_cycles is set.
        """
        missing = [
            tid for tid in (task_id, depends_on_task_id) if tid not in self._tasks
        ]
        if missing:
            logger.debug(
                "Ignoring dependency %s -> %s: unknown %s",
                task_id,
                depends_on_task_id,
                ", ".join(missing),
            )
            return LinkResult(
                status=LinkStatus.not_found,
                task_id=task_id,
                depends_on_task_id=depends_on_task_id,
                missing=missing,
            )

        if reject_cycles:
            path = self._dependency_path(depends_on_task_id, task_id)
            if path is not None:
                cycle = [task_id, *path]
                logger.debug("Rejecting dependency cycle %s", " -> ".join(cycle))
                return LinkResult(
                    status=LinkStatus.cycle_detected,
                    task_id=task_id,
                    depends_on_task_id=depends_on_task_id,
                    cycle=cycle,
                )

        self._tasks[task_id].dependencies.append(depends_on_task_id)
        self._dependents.setdefault(depends_on_task_id, []).append(task_id)
        return LinkResult(
            status=LinkStatus.success,
            task_id=task_id,
            depends_on_task_id=depends_on_task_id,
        )

    # -- queries ------------------------------------------------------------

    def can_start_task(self, task_id: str) -> bool:
        """True if every dependency exists and is completed."""
        task = self._tasks.get(task_id)
        if task is None:
            return False
        for dep_id in task.dependencies:
            dep = self._tasks.get(dep_id)
            if dep is None or dep.status != TaskStatus.completed:
                return False
        return True

    def get_task_progress(self, task_id: str) -> float:
        """Completion percentage (0-100) rolled up from subtasks.

        A leaf is 100 when completed and 0 otherwise. A parent is the plain
        mean of its direct subtasks' progress. A subtask that points back
        into its own ancestry counts as 0.
        """
        if task_id not in self._tasks:
            return 0.0

        progress: dict[str, float] = {}
        on_path: set[str] = set()
        stack: list[tuple[str, bool]] = [(task_id, False)]

        while stack:
            current, expanded = stack.pop()
            task = self._tasks.get(current)
            if task is None:
                progress[current] = 0.0
                continue

            if expanded:
                on_path.discard(current)
                progress[current] = sum(
                    progress.get(child, 0.0) for child in task.subtasks
                ) / len(task.subtasks)
                continue

            if current in progress or current in on_path:
                continue
            if task.is_leaf():
                progress[current] = (
                    100.0 if task.status == TaskStatus.completed else 0.0
                )
                continue

            on_path.add(current)
            stack.append((current, True))
            for child in reversed(task.subtasks):
                if child not in progress and child not in on_path:
                    stack.append((child, False))

        return progress[task_id]

    def get_critical_path(self, event_id: Any) -> list[str]:
        """Longest chain of dependents among the tasks of one event.

        Length is measured in tasks, not hours.
        """
        event_tasks = [t for t in self._tasks.values() if t.event_id == event_id]
        return self.find_longest_path(event_tasks)

    def find_longest_path(self, tasks: Iterable[Task]) -> list[str]:
        """Longest dependents chain starting from any of the given tasks.

        The visited set is shared by all roots, so each task seeds or joins
        at most one search. On equal length the first path found wins.
        """
        visited: set[str] = set()
        longest: list[str] = []
        for task in tasks:
            if task.id in visited:
                continue
            path = self._longest_path_from(task.id, visited)
            if len(path) > len(longest):
                longest = path
        return longest

    def _longest_path_from(self, root: str, visited: set[str]) -> list[str]:
        visited.add(root)
        stack = [
            _PathFrame(
                task_id=root,
                path=[root],
                pending=iter(self._dependents.get(root, [])),
                best=[root],
            )
        ]
        result: list[str] = []

        while stack:
            frame = stack[-1]
            for dep_id in frame.pending:
                if dep_id not in visited:
                    visited.add(dep_id)
                    path = [*frame.path, dep_id]
                    stack.append(
                        _PathFrame(
                            task_id=dep_id,
                            path=path,
                            pending=iter(self._dependents.get(dep_id, [])),
                            best=path,
                        )
                    )
                    break
            else:
                stack.pop()
                if stack:
                    parent = stack[-1]
                    if len(frame.best) > len(parent.best):
                        parent.best = frame.best
                else:
                    result = frame.best

        return result

    def get_ready_tasks(self, event_id: Any = None) -> list[Task]:
        """Pending tasks whose dependencies are all completed."""
        return [
            t
            for t in self._scoped(event_id)
            if t.status == TaskStatus.pending and self.can_start_task(t.id)
        ]

    def get_execution_waves(self, event_id: Any = None) -> list[list[Task]]:
        """Group unfinished tasks into dependency layers.

        Each wave can run in parallel once the previous waves are done.
        Tasks that can never become ready (cycles, unknown or out-of-scope
        unfinished dependencies) are returned together as a final wave.
        """
        completed = {
            t.id for t in self._tasks.values() if t.status == TaskStatus.completed
        }
        remaining = [
            t for t in self._scoped(event_id) if t.status != TaskStatus.completed
        ]
        waves: list[list[Task]] = []

        while remaining:
            ready = [
                t for t in remaining if all(dep in completed for dep in t.dependencies)
            ]
            if not ready:
                waves.append(remaining)
                break
            waves.append(ready)
            completed.update(t.id for t in ready)
            remaining = [t for t in remaining if t.id not in completed]

        return waves

    def iter_tree(
        self, event_id: Any = None, root: str | None = None
    ) -> Iterator[tuple[Task, int]]:
        """Yield (task, depth) pairs, depth-first from each root task.

        Roots are tasks that are not linked under an existing parent. Tasks
        that only hang off a containment cycle have no such root; they are
        yielded afterwards at depth 0. Each task is yielded once even if it
        is listed under several parents.

        With ``root``, only that task's subtree is walked, starting at
        depth 0. An unknown root yields nothing.
        """
        seen: set[str] = set()
        if root is not None:
            yield from self._walk_subtree(root, seen)
            return

        scoped = self._scoped(event_id)
        for task in scoped:
            parent = self._tasks.get(task.parent_task_id or "")
            if parent is not None and task.id in parent.subtasks:
                continue
            yield from self._walk_subtree(task.id, seen)
        for task in scoped:
            if task.id not in seen:
                yield from self._walk_subtree(task.id, seen)

    def _walk_subtree(
        self, root: str, seen: set[str]
    ) -> Iterator[tuple[Task, int]]:
        stack = [(root, 0)]
        while stack:
            task_id, depth = stack.pop()
            task = self._tasks.get(task_id)
            if task is None or task_id in seen:
                continue
            seen.add(task_id)
            yield task, depth
            for child in reversed(task.subtasks):
                stack.append((child, depth + 1))

    def _scoped(self, event_id: Any) -> list[Task]:
        if event_id is None:
            return list(self._tasks.values())
        return [t for t in self._tasks.values() if t.event_id == event_id]

    # -- validation ---------------------------------------------------------

    def validate(self) -> list[str]:
        """Return a list of graph problems (empty if healthy)."""
        errors: list[str] = []

        for task in self._tasks.values():
            if task.parent_task_id:
                parent = self._tasks.get(task.parent_task_id)
                if parent is None:
                    errors.append(
                        f"Task '{task.id}' has unknown parent '{task.parent_task_id}'"
                    )
                elif task.id not in parent.subtasks:
                    errors.append(
                        f"Task '{task.id}' is not linked under parent "
                        f"'{task.parent_task_id}'"
                    )

            seen: set[str] = set()
            for dep_id in task.dependencies:
                if dep_id not in self._tasks:
                    errors.append(
                        f"Task '{task.id}' depends on unknown task '{dep_id}'"
                    )
                if dep_id in seen:
                    errors.append(f"Duplicate dependency: '{task.id}' -> '{dep_id}'")
                seen.add(dep_id)

        for dep_id, dependents in self._dependents.items():
            for task_id in dependents:
                task = self._tasks.get(task_id)
                if task is None or dep_id not in task.dependencies:
                    errors.append(
                        f"Dependency index lists '{task_id}' under '{dep_id}' "
                        f"but '{task_id}' does not depend on it"
                    )

        cycle = self.find_dependency_cycle()
        if cycle:
            errors.append(f"Dependency cycle detected: {' -> '.join(cycle)}")

        cycle = self.find_containment_cycle()
        if cycle:
            errors.append(f"Subtask cycle detected: {' -> '.join(cycle)}")

        return errors

    def find_dependency_cycle(self) -> list[str] | None:
        """First dependency cycle as an id path, or None."""
        return self._find_cycle(lambda t: t.dependencies)

    def find_containment_cycle(self) -> list[str] | None:
        """First parent/subtask cycle as an id path, or None."""
        return self._find_cycle(lambda t: t.subtasks)

    def _find_cycle(self, edges: Callable[[Task], list[str]]) -> list[str] | None:
        color: dict[str, int] = {}

        for root in self._tasks:
            if color.get(root, _WHITE) != _WHITE:
                continue
            color[root] = _GRAY
            path = [root]
            stack = [iter(edges(self._tasks[root]))]

            while stack:
                for nxt in stack[-1]:
                    if nxt not in self._tasks:
                        continue
                    state = color.get(nxt, _WHITE)
                    if state == _GRAY:
                        return [*path[path.index(nxt) :], nxt]
                    if state == _WHITE:
                        color[nxt] = _GRAY
                        path.append(nxt)
                        stack.append(iter(edges(self._tasks[nxt])))
                        break
                else:
                    color[path.pop()] = _BLACK
                    stack.pop()

        return None

    def _dependency_path(self, start: str, goal: str) -> list[str] | None:
        """Path from start to goal following dependency lists, or None."""
        parents: dict[str, str | None] = {start: None}
        stack = [start]
        while stack:
            current = stack.pop()
            if current == goal:
                path: list[str] = []
                node: str | None = current
                while node is not None:
                    path.append(node)
                    node = parents[node]
                path.reverse()
                return path
            for dep_id in self._tasks[current].dependencies:
                if dep_id in self._tasks and dep_id not in parents:
                    parents[dep_id] = current
                    stack.append(dep_id)
        return None
