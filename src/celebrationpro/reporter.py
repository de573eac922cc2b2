"""Reporter: terminal output for hierarchy queries.

Follows a Real/Mock pattern. The CLI calls reporter methods with query
results; implementations control how they are displayed.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import typer

from celebrationpro.hierarchy.models import Task, TaskStatus


@dataclass
class ReportEvent:
    """Record of a reporter call for testing."""

    event_type: str
    data: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class Reporter(Protocol):
    """Protocol for presenting hierarchy query results."""

    def on_progress(self, task: Task, percent: float, depth: int) -> None:
        """Called once per task while walking the progress tree."""
        ...

    def on_ready(self, tasks: list[Task]) -> None:
        """Called with the tasks that can start now."""
        ...

    def on_critical_path(self, event_id: str, path: list[Task]) -> None:
        """Called with the critical path of an event."""
        ...

    def on_waves(self, waves: list[list[Task]]) -> None:
        """Called with the execution waves of unfinished tasks."""
        ...

    def on_validation(self, issues: list[str]) -> None:
        """Called with graph validation issues (possibly empty)."""
        ...

    def on_status_changed(
        self, task_id: str, old: TaskStatus, new: TaskStatus
    ) -> None:
        """Called after a task status was written back to the plan."""
        ...


def _format_hours(task: Task) -> str:
    if task.estimated_hours is None:
        return ""
    return f" [{task.actual_hours:g}/{task.estimated_hours:g}h]"


class RealReporter:
    """Reports to the terminal."""

    def on_progress(self, task: Task, percent: float, depth: int) -> None:
        indent = "  " * depth
        typer.echo(
            f"{indent}{task.id}: {task.name} {percent:.0f}% "
            f"({task.status}){_format_hours(task)}"
        )

    def on_ready(self, tasks: list[Task]) -> None:
        if not tasks:
            typer.echo("No tasks ready to start.")
            return
        for task in tasks:
            assignee = f" -> {task.assigned_to}" if task.assigned_to else ""
            typer.echo(f"  {task.id}: {task.name} ({task.priority}){assignee}")

    def on_critical_path(self, event_id: str, path: list[Task]) -> None:
        if not path:
            typer.echo(f"No critical path for event '{event_id}'.")
            return
        typer.echo(f"Critical path for '{event_id}' ({len(path)} tasks):")
        typer.echo("  " + " -> ".join(t.id for t in path))

    def on_waves(self, waves: list[list[Task]]) -> None:
        if not waves:
            typer.echo("All tasks completed.")
            return
        for index, wave in enumerate(waves, start=1):
            typer.echo(f"Wave {index}: {', '.join(t.id for t in wave)}")

    def on_validation(self, issues: list[str]) -> None:
        if not issues:
            typer.echo("Plan is valid.")
            return
        typer.echo(f"Found {len(issues)} issue(s):")
        for issue in issues:
            typer.echo(f"  - {issue}")

    def on_status_changed(
        self, task_id: str, old: TaskStatus, new: TaskStatus
    ) -> None:
        typer.echo(f"{task_id}: {old} -> {new}")


@dataclass
class MockReporter:
    """Records reporter calls for testing."""

    events: list[ReportEvent] = field(default_factory=list)

    def on_progress(self, task: Task, percent: float, depth: int) -> None:
        self.events.append(
            ReportEvent(
                event_type="progress",
                data={"task_id": task.id, "percent": percent, "depth": depth},
            )
        )

    def on_ready(self, tasks: list[Task]) -> None:
        self.events.append(
            ReportEvent(event_type="ready", data={"task_ids": [t.id for t in tasks]})
        )

    def on_critical_path(self, event_id: str, path: list[Task]) -> None:
        self.events.append(
            ReportEvent(
                event_type="critical_path",
                data={"event_id": event_id, "task_ids": [t.id for t in path]},
            )
        )

    def on_waves(self, waves: list[list[Task]]) -> None:
        self.events.append(
            ReportEvent(
                event_type="waves",
                data={"waves": [[t.id for t in wave] for wave in waves]},
            )
        )

    def on_validation(self, issues: list[str]) -> None:
        self.events.append(
            ReportEvent(event_type="validation", data={"issues": list(issues)})
        )

    def on_status_changed(
        self, task_id: str, old: TaskStatus, new: TaskStatus
    ) -> None:
        self.events.append(
            ReportEvent(
                event_type="status_changed",
                data={"task_id": task_id, "old": old, "new": new},
            )
        )

    def of_type(self, event_type: str) -> list[ReportEvent]:
        return [e for e in self.events if e.event_type == event_type]
