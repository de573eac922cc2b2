"""CelebrationPro CLI for event task plans.

Subcommands:
    progress        Show the task tree with rolled-up progress
    ready           List tasks whose dependencies are all completed
    critical-path   Show the longest dependency chain of an event
    waves           Group unfinished tasks into parallel execution waves
    validate        Report broken links and cycles in the plan
    set-status      Change a task's status in the plan file
"""

import logging
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

import typer

from celebrationpro.hierarchy.engine import EventTaskHierarchy
from celebrationpro.hierarchy.models import TaskStatus
from celebrationpro.hierarchy.status import is_terminal, next_status, valid_transition
from celebrationpro.reporter import RealReporter, Reporter
from celebrationpro.sources.detect import SOURCE_NAMES, detect_source
from celebrationpro.sources.protocol import PlanFormatError, PlanSource

logger = logging.getLogger(__name__)

app = typer.Typer(name="celebrationpro", no_args_is_help=True)


class Verbosity(StrEnum):
    quiet = "quiet"
    normal = "normal"
    verbose = "verbose"


_LOG_LEVELS = {
    Verbosity.quiet: logging.WARNING,
    Verbosity.normal: logging.INFO,
    Verbosity.verbose: logging.DEBUG,
}


@dataclass
class CliState:
    """Options shared by every subcommand."""

    plan: Path | None = None
    source_type: str = "auto"
    verbosity: Verbosity = Verbosity.normal


def resolve_verbosity(verbose: bool, quiet: bool) -> Verbosity:
    """Map the --verbose/--quiet flags to a Verbosity level."""
    if verbose and quiet:
        raise typer.BadParameter("--verbose and --quiet are mutually exclusive")
    if verbose:
        return Verbosity.verbose
    if quiet:
        return Verbosity.quiet
    return Verbosity.normal


def configure_logging(verbosity: Verbosity) -> None:
    logging.basicConfig(
        level=_LOG_LEVELS[verbosity],
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def get_reporter() -> Reporter:
    """Return the reporter used for command output."""
    return RealReporter()


def load_source(state: CliState) -> PlanSource:
    """Find the plan source for the current options or exit with an error."""
    source = detect_source(Path.cwd(), state.source_type, state.plan)
    if source is None:
        where = str(state.plan) if state.plan else str(Path.cwd())
        typer.echo(f"Error: no {state.source_type} plan found at {where}", err=True)
        raise typer.Exit(code=1)
    return source


def load_hierarchy(source: PlanSource) -> EventTaskHierarchy:
    """Load the hierarchy from a source, turning parse errors into exit 1."""
    try:
        hierarchy = source.load()
    except (PlanFormatError, FileNotFoundError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    logger.debug("Loaded %d tasks from %s", len(hierarchy), source.source_name)
    return hierarchy


def resolve_event_id(hierarchy: EventTaskHierarchy, event_id: str | None) -> str:
    """Use the given event id, or the only event present in the plan."""
    if event_id is not None:
        return event_id
    events = {t.event_id for t in hierarchy.tasks if t.event_id is not None}
    if len(events) != 1:
        found = ", ".join(sorted(str(e) for e in events)) or "none"
        typer.echo(
            f"Error: specify an event id (events in plan: {found})", err=True
        )
        raise typer.Exit(code=1)
    return str(events.pop())


@app.callback()
def main(
    ctx: typer.Context,
    plan: Path | None = typer.Option(
        None, "--plan", help="Path to a plan file (JSON or markdown)."
    ),
    source_type: str = typer.Option(
        "auto", "--from", help=f"Plan format: {', '.join(SOURCE_NAMES)}."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Warnings only."),
) -> None:
    """Query and update event task plans."""
    if source_type not in SOURCE_NAMES:
        raise typer.BadParameter(
            f"unknown source '{source_type}'", param_hint="--from"
        )
    verbosity = resolve_verbosity(verbose=verbose, quiet=quiet)
    configure_logging(verbosity)
    ctx.obj = CliState(plan=plan, source_type=source_type, verbosity=verbosity)


@app.command()
def progress(
    ctx: typer.Context,
    task_id: str | None = typer.Argument(None, help="Only show this task's subtree."),
    event: str | None = typer.Option(None, help="Only show tasks of this event."),
) -> None:
    """Show the task tree with rolled-up progress."""
    hierarchy = load_hierarchy(load_source(ctx.obj))
    reporter = get_reporter()

    if task_id is not None and task_id not in hierarchy:
        typer.echo(f"Error: task '{task_id}' not found", err=True)
        raise typer.Exit(code=1)

    for task, depth in hierarchy.iter_tree(event, root=task_id):
        reporter.on_progress(task, hierarchy.get_task_progress(task.id), depth)


@app.command()
def ready(
    ctx: typer.Context,
    event: str | None = typer.Option(None, help="Only list tasks of this event."),
) -> None:
    """List tasks whose dependencies are all completed."""
    hierarchy = load_hierarchy(load_source(ctx.obj))
    get_reporter().on_ready(hierarchy.get_ready_tasks(event))


@app.command(name="critical-path")
def critical_path(
    ctx: typer.Context,
    event_id: str | None = typer.Argument(
        None, help="Event id (defaults to the only event in the plan)."
    ),
) -> None:
    """Show the longest dependency chain of an event."""
    hierarchy = load_hierarchy(load_source(ctx.obj))
    event_id = resolve_event_id(hierarchy, event_id)
    task_ids = hierarchy.get_critical_path(event_id)
    path = [task for task in map(hierarchy.get_task, task_ids) if task is not None]
    get_reporter().on_critical_path(event_id, path)


@app.command()
def waves(
    ctx: typer.Context,
    event: str | None = typer.Option(None, help="Only plan tasks of this event."),
) -> None:
    """Group unfinished tasks into parallel execution waves."""
    hierarchy = load_hierarchy(load_source(ctx.obj))
    get_reporter().on_waves(hierarchy.get_execution_waves(event))


@app.command()
def validate(ctx: typer.Context) -> None:
    """Report broken links and cycles in the plan."""
    hierarchy = load_hierarchy(load_source(ctx.obj))
    issues = hierarchy.validate()
    get_reporter().on_validation(issues)
    if issues:
        raise typer.Exit(code=1)


@app.command(name="set-status")
def set_status(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task to update."),
    status: TaskStatus | None = typer.Argument(
        None, help="New status (defaults to the next step after the current one)."
    ),
    force: bool = typer.Option(
        False, "--force", help="Skip the status transition check."
    ),
) -> None:
    """Change a task's status in the plan file."""
    source = load_source(ctx.obj)
    hierarchy = load_hierarchy(source)

    task = hierarchy.get_task(task_id)
    if task is None:
        typer.echo(f"Error: task '{task_id}' not found", err=True)
        raise typer.Exit(code=1)

    old = task.status
    if is_terminal(old) and not force:
        typer.echo(f"Error: task '{task_id}' is already {old}", err=True)
        raise typer.Exit(code=1)

    if status is None:
        status = next_status(old)
        if status is None:
            typer.echo(
                f"Error: no default next status for '{task_id}' ({old}); "
                "give one explicitly",
                err=True,
            )
            raise typer.Exit(code=1)

    if not force and not valid_transition(old, status):
        typer.echo(
            f"Error: cannot move '{task_id}' from {old} to {status} "
            "(use --force to override)",
            err=True,
        )
        raise typer.Exit(code=1)

    if status == TaskStatus.in_progress and not hierarchy.can_start_task(task_id):
        logger.warning("Task %s started before its dependencies completed", task_id)

    source.update_status(task_id, status)
    get_reporter().on_status_changed(task_id, old, status)


if __name__ == "__main__":
    app()
