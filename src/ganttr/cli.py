"""Typer CLI for ganttr."""

from __future__ import annotations

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from ganttr.dates import difference_in_days, format_date, today as utc_today
from ganttr.exceptions import GanttrError
from ganttr.logger import setup_logger
from ganttr.models import AutoStatus, ExplicitStatus, ProjectConfig, Status, parse_status_setting
from ganttr.persistence import Store
from ganttr.project import Project
from ganttr.reports import (
    at_risk_and_overdue,
    baseline_variance,
    milestones,
    notifications,
    upcoming,
)
from ganttr.rollup import weighted_percent
from ganttr.scheduler import ScheduleReport
from ganttr.status import display_status

app = typer.Typer(
    name="ganttr",
    help="Task hierarchy scheduler: dependencies, rollups and status for the command line.",
    no_args_is_help=True,
)
console = Console()

STATUS_STYLES = {
    Status.COMPLETE: "green",
    Status.ON_TRACK: None,
    Status.AT_RISK: "bold yellow",
    Status.DELAYED: "bold red",
}


def _get_store() -> Store:
    return Store()


def _complete_task_id(incomplete: str) -> list[tuple[str, str]]:
    """Shell completion for task IDs, with the task name as help text."""
    try:
        project = Store().load()
    except GanttrError:
        return []
    q = incomplete.lower()
    return [
        (str(tid), task.name)
        for tid, task in project.tasks.items()
        if str(tid).startswith(q) or q in task.name.lower()
    ]


def _split_ids(values: list[str] | None) -> list[int]:
    """Accept repeated options and comma-separated lists (--depends 1,2 --depends 3)."""
    ids: list[int] = []
    for v in values or []:
        for part in v.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                ids.append(int(part))
            except ValueError:
                console.print(f"[red]Invalid task ID '{part}'.[/red]")
                raise typer.Exit(1)
    return ids


def _fail(err: Exception) -> typer.Exit:
    console.print(f"[red]{err}[/red]")
    return typer.Exit(1)


def _load() -> tuple[Store, Project]:
    store = _get_store()
    try:
        return store, store.load()
    except GanttrError as e:
        raise _fail(e)


def _print_cycle_warning(report: ScheduleReport) -> None:
    if report.aborted:
        edges = ", ".join(f"{u} -> {v}" for u, v in report.cycle or [])
        console.print(
            f"[yellow]Circular dependency detected ({edges}). "
            f"Auto-scheduling skipped; dates left unchanged.[/yellow]"
        )


def _commit(store: Store, project: Project) -> ScheduleReport:
    """Recalculate schedule and rollups, then save."""
    report = project.recalculate()
    _print_cycle_warning(report)
    store.save(project)
    return report


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.callback()
def main(
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="Increase log verbosity (repeatable)")] = 0,
) -> None:
    setup_logger(verbose)


@app.command()
def init(
    name: Annotated[str, typer.Option(help="Project name", prompt="Project name")],
    start: Annotated[Optional[str], typer.Option(help="Planned project start (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option(help="Planned project end (YYYY-MM-DD)")] = None,
    description: str = "",
    at_risk_days: Annotated[int, typer.Option(help="Days before the end date a task counts as due soon")] = 3,
    at_risk_threshold: Annotated[int, typer.Option(help="Completion percent below which a due-soon task is At Risk")] = 75,
    upcoming_days: Annotated[int, typer.Option(help="Window for the upcoming-deadlines report")] = 7,
) -> None:
    """Initialize (or reinitialize) project configuration. Existing tasks are kept."""
    store, project = _load()
    project.config = ProjectConfig(
        name=name,
        description=description,
        start_date=start,
        end_date=end,
        at_risk_days=at_risk_days,
        at_risk_threshold=at_risk_threshold,
        upcoming_days=upcoming_days,
    )
    store.save(project)
    console.print(f"[green]Project '{name}' initialized.[/green]")


@app.command()
def add(
    name: str,
    start: Annotated[Optional[str], typer.Option(help="Start date (YYYY-MM-DD), defaults to today")] = None,
    end: Annotated[Optional[str], typer.Option(help="End date (YYYY-MM-DD), defaults to the start date")] = None,
    parent: Annotated[Optional[int], typer.Option("--parent", "-p", help="Parent task ID", autocompletion=_complete_task_id)] = None,
    percent: Annotated[int, typer.Option("--percent", help="Percent complete (0-100)")] = 0,
    depends: Annotated[Optional[list[str]], typer.Option("--depends", help="Task IDs this depends on")] = None,
    resources: Annotated[Optional[list[str]], typer.Option("--resource", "-r", help="Assigned resource")] = None,
    description: Annotated[Optional[str], typer.Option(help="Short description")] = None,
    notes: Annotated[Optional[str], typer.Option(help="Free-form notes")] = None,
) -> None:
    """Add a new task.

    Dependencies can be given individually (--depends 1 --depends 2) or
    comma-separated (--depends 1,2,3). Subtasks cannot have dependencies.
    """
    store, project = _load()
    start = start or format_date(utc_today())
    end = end or start
    try:
        task = project.add_task(
            name,
            start,
            end,
            parent_id=parent,
            percent_complete=percent,
            dependencies=_split_ids(depends),
            resources=resources or [],
            description=description,
            notes=notes,
        )
    except GanttrError as e:
        raise _fail(e)
    _commit(store, project)
    console.print(f"[green]Added '{task.name}' as {task.id}[/green]")


@app.command("add-subtasks")
def add_subtasks(
    parent: Annotated[int, typer.Argument(help="Parent task ID", autocompletion=_complete_task_id)],
    names: Annotated[list[str], typer.Argument(help="Subtask names")],
) -> None:
    """Add several subtasks at once; each starts and ends on the parent's start date."""
    store, project = _load()
    try:
        created = project.add_subtasks(parent, names)
    except GanttrError as e:
        raise _fail(e)
    _commit(store, project)
    console.print(f"[green]{len(created)} subtask(s) added: {', '.join(str(t.id) for t in created)}[/green]")


@app.command("list")
def list_tasks(
    status_filter: Annotated[Optional[str], typer.Option("--status", "-s", help="Filter by status (auto labels: on_track, at_risk, delayed, complete)")] = None,
    search: Annotated[Optional[str], typer.Option("--search", "-q", help="Filter by name (case-insensitive substring match)")] = None,
    resource: Annotated[Optional[str], typer.Option("--resource", "-r", help="Filter by resource")] = None,
) -> None:
    """List tasks as an outline with dates, completion and status."""
    store, project = _load()
    if not project.tasks:
        console.print("No tasks found.")
        return

    wanted: Status | None = None
    if status_filter:
        try:
            setting = parse_status_setting(status_filter)
        except GanttrError as e:
            raise _fail(e)
        if isinstance(setting, ExplicitStatus):
            wanted = setting.value

    now = utc_today()
    table = Table(title=project.config.name or "Tasks")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Days")
    table.add_column("%")
    table.add_column("Status")
    table.add_column("Depends On")
    table.add_column("Resources")

    shown = 0
    for task, depth in project.walk():
        status = display_status(task, now, project.config)
        if wanted is not None and status != wanted:
            continue
        if search and search.lower() not in task.name.lower():
            continue
        if resource and not any(resource.lower() in r.lower() for r in task.resources):
            continue
        shown += 1
        name = "  " * depth + task.name
        if project.is_parent(task.id):
            name = f"[bold]{name}[/bold]"
        table.add_row(
            str(task.id),
            name,
            task.start_date,
            task.end_date,
            str(difference_in_days(task.start_date, task.end_date) + 1),
            f"{task.percent_complete}%",
            status.value,
            ", ".join(str(d) for d in task.dependencies) or "-",
            ", ".join(task.resources) or "-",
            style=STATUS_STYLES[status],
        )

    if not shown:
        console.print("No tasks match the filter.")
        return
    console.print(table)
    if status_filter or search or resource:
        console.print(f"[dim]Showing {shown} of {len(project.tasks)} tasks[/dim]")


@app.command()
def show(task_id: Annotated[int, typer.Argument(autocompletion=_complete_task_id)]) -> None:
    """Show all details for a single task."""
    _, project = _load()
    try:
        t = project.get(task_id)
    except GanttrError as e:
        raise _fail(e)

    status = display_status(t, utc_today(), project.config)
    console.print(f"\n[bold]{t.id}[/bold]  {t.name}")
    console.print(f"  Dates:      {t.start_date} -> {t.end_date} ({difference_in_days(t.start_date, t.end_date) + 1} days)")
    console.print(f"  Complete:   {t.percent_complete}%")
    console.print(f"  Status:     {status.value}{' (auto)' if isinstance(t.status, AutoStatus) else ''}")
    if t.parent_id is not None:
        console.print(f"  Parent:     {t.parent_id}")
    kids = project.children(t.id)
    if kids:
        console.print(f"  Subtasks:   {', '.join(str(c.id) for c in kids)}")
    console.print(f"  Depends on: {', '.join(str(d) for d in t.dependencies) or 'none'}")
    console.print(f"  Blocks:     {', '.join(str(d.id) for d in project.dependents(t.id)) or 'none'}")
    if t.resources:
        console.print(f"  Resources:  {', '.join(t.resources)}")
    for key, value in t.custom_fields.items():
        console.print(f"  {key}: {value}")
    if t.description:
        console.print(f"  Description: {t.description}")
    if t.notes:
        console.print("\n  [dim]-- Notes --[/dim]")
        for line in t.notes.splitlines():
            console.print(f"  {line}")

    base = project.baseline.get(t.id)
    if base is not None:
        console.print("\n  [dim]-- Baseline --[/dim]")
        console.print(f"  {base.start_date} -> {base.end_date}")
    console.print()


@app.command()
def update(
    task_id: Annotated[int, typer.Argument(autocompletion=_complete_task_id)],
    name: Annotated[Optional[str], typer.Option(help="New task name")] = None,
    start: Annotated[Optional[str], typer.Option(help="New start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option(help="New end date (YYYY-MM-DD)")] = None,
    percent: Annotated[Optional[int], typer.Option(help="Percent complete (clamped to 0-100)")] = None,
    status: Annotated[Optional[str], typer.Option(help="auto, on_track, at_risk, delayed or complete")] = None,
    add_dep: Annotated[Optional[list[str]], typer.Option("--add-dep", help="Add a dependency (task ID)")] = None,
    remove_dep: Annotated[Optional[list[str]], typer.Option("--remove-dep", help="Remove a dependency (task ID)")] = None,
    resources: Annotated[Optional[list[str]], typer.Option("--resource", "-r", help="Replace assigned resources")] = None,
    description: Annotated[Optional[str], typer.Option(help="New description")] = None,
    notes: Annotated[Optional[str], typer.Option(help="New notes")] = None,
    field: Annotated[Optional[list[str]], typer.Option("--field", help="Custom field as key=value")] = None,
) -> None:
    """Update fields of an existing task."""
    store, project = _load()
    try:
        t = project.get(task_id)
        deps = None
        if add_dep or remove_dep:
            removing = set(_split_ids(remove_dep))
            for dep in removing - set(t.dependencies):
                console.print(f"[yellow]{task_id} does not depend on {dep}, skipping.[/yellow]")
            deps = [d for d in t.dependencies if d not in removing] + _split_ids(add_dep)

        custom = None
        if field:
            custom = dict(t.custom_fields)
            for item in field:
                key, sep, value = item.partition("=")
                if not sep or not key.strip():
                    console.print(f"[red]Invalid custom field '{item}'. Use key=value.[/red]")
                    raise typer.Exit(1)
                custom[key.strip()] = value.strip()

        project.update_task(
            task_id,
            name=name,
            start_date=start,
            end_date=end,
            percent_complete=percent,
            dependencies=deps,
            status=status,
            description=description,
            notes=notes,
            resources=resources,
            custom_fields=custom,
        )
    except GanttrError as e:
        raise _fail(e)
    _commit(store, project)
    console.print(f"[green]Updated {task_id}.[/green]")


@app.command()
def move(
    task_id: Annotated[int, typer.Argument(autocompletion=_complete_task_id)],
    days: Annotated[int, typer.Option("--days", "-d", help="Days to shift (negative moves earlier)")],
) -> None:
    """Shift a task by whole days, keeping its duration."""
    store, project = _load()
    try:
        t = project.move_task(task_id, days)
    except GanttrError as e:
        raise _fail(e)
    _commit(store, project)
    console.print(f"[green]Moved {task_id} to {t.start_date} -> {t.end_date}.[/green]")


@app.command()
def resize(
    task_id: Annotated[int, typer.Argument(autocompletion=_complete_task_id)],
    start: Annotated[int, typer.Option("--start", help="Days to move the start date")] = 0,
    end: Annotated[int, typer.Option("--end", help="Days to move the end date")] = 0,
) -> None:
    """Move the start and/or end date of a task."""
    store, project = _load()
    try:
        t = project.resize_task(task_id, start_delta=start, end_delta=end)
    except GanttrError as e:
        raise _fail(e)
    _commit(store, project)
    console.print(f"[green]Resized {task_id} to {t.start_date} -> {t.end_date}.[/green]")


@app.command()
def delete(task_id: Annotated[int, typer.Argument(autocompletion=_complete_task_id)]) -> None:
    """Delete a task with all its subtasks and remove it from dependency lists."""
    store, project = _load()
    try:
        removed = project.delete_task(task_id)
    except GanttrError as e:
        raise _fail(e)
    _commit(store, project)
    console.print(f"[green]Deleted {', '.join(str(r) for r in removed)}.[/green]")


@app.command()
def schedule() -> None:
    """Re-run dependency scheduling and parent rollups."""
    store, project = _load()
    report = _commit(store, project)
    if report.aborted:
        raise typer.Exit(1)
    if not report.shifts:
        console.print("[green]Schedule is up to date.[/green]")
        return

    table = Table(title="Rescheduled")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Was")
    table.add_column("Now")
    table.add_column("Shift")
    for s in report.shifts:
        table.add_row(
            str(s.task_id),
            project.tasks[s.task_id].name,
            f"{s.old_start} -> {s.old_end}",
            f"{s.new_start} -> {s.new_end}",
            f"+{s.days}d",
        )
    console.print(table)


@app.command()
def baseline() -> None:
    """Snapshot the current schedule as the baseline."""
    store, project = _load()
    project.set_baseline()
    store.save(project)
    console.print(f"[green]Baseline set for {len(project.baseline)} task(s).[/green]")


@app.command()
def variance() -> None:
    """Compare current dates against the baseline."""
    _, project = _load()
    if not project.baseline:
        console.print("[yellow]No baseline set. Run 'ganttr baseline' first.[/yellow]")
        raise typer.Exit(1)

    table = Table(title="Baseline Variance")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Baseline")
    table.add_column("Start Slip")
    table.add_column("End Slip")
    for v in baseline_variance(project.tasks, project.baseline):
        style = "bold red" if v.end_slip > 0 else None
        table.add_row(
            str(v.task_id),
            v.name,
            f"{v.baseline_start} -> {v.baseline_end}",
            f"{v.start_slip:+d}d",
            f"{v.end_slip:+d}d",
            style=style,
        )
    console.print(table)


@app.command()
def report(
    days: Annotated[Optional[int], typer.Option(help="Upcoming-deadline window in days")] = None,
) -> None:
    """Project report: at-risk and overdue tasks, upcoming deadlines, milestones."""
    _, project = _load()
    now = utc_today()
    config = project.config
    days = days if days is not None else config.upcoming_days

    console.print(f"\n[bold]{config.name or 'Project'} report[/bold]  ({format_date(now)})")
    if config.start_date or config.end_date:
        console.print(f"  Planned: {config.start_date or '?'} -> {config.end_date or '?'}")

    top = project.top_level()
    if top:
        console.print(f"  Overall completion: {weighted_percent(top)}%")

    console.print("\n[bold]At-risk & overdue[/bold]")
    risky = at_risk_and_overdue(project.tasks, now, config)
    if not risky:
        console.print("  No at-risk or overdue tasks.")
    for t in risky:
        st = display_status(t, now, config)
        console.print(f"  {t.id}  {t.name}  (due {t.end_date}, [{STATUS_STYLES[st] or 'default'}]{st.value}[/])")

    console.print(f"\n[bold]Upcoming deadlines ({days} days)[/bold]")
    soon = upcoming(project.tasks, now, days)
    if not soon:
        console.print(f"  No upcoming deadlines in the next {days} days.")
    for t in soon:
        console.print(f"  {t.id}  {t.name}  (due {t.end_date}, {t.percent_complete}%)")

    console.print("\n[bold]Milestones[/bold]")
    ms = milestones(project.tasks, now)
    if not ms:
        console.print("  No milestones defined.")
    for m in ms:
        console.print(f"  {m.task.id}  {m.task.name}  ({m.task.end_date}, {m.state})")
    console.print()


@app.command("notifications")
def show_notifications() -> None:
    """Overdue and due-soon alerts."""
    _, project = _load()
    alerts = notifications(project.tasks, utc_today(), project.config)
    if not alerts:
        console.print("[green]No notifications.[/green]")
        return
    for n in alerts:
        style = "bold red" if n.kind == "overdue" else "yellow"
        console.print(f"[{style}]{n.message}[/{style}]")


if __name__ == "__main__":
    app()
