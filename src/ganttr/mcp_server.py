"""MCP server for ganttr: exposes task hierarchy tools to AI assistants."""

from __future__ import annotations

import json

from mcp.server.fastmcp import FastMCP

from ganttr.dates import difference_in_days, format_date, today as utc_today
from ganttr.exceptions import GanttrError
from ganttr.models import Task
from ganttr.persistence import Store
from ganttr.project import Project
from ganttr.reports import at_risk_and_overdue, baseline_variance, milestones, notifications, upcoming
from ganttr.status import display_status

mcp = FastMCP(
    "ganttr",
    instructions="""\
ganttr keeps a project as a tree of tasks. Each task has a start and end date \
(YYYY-MM-DD, inclusive), a percent complete, an optional parent, and a list of \
finish-to-start dependencies (task IDs that must end before it can start).

Key concepts:
- **Parent tasks**: any task with subtasks. Their dates and completion are \
calculated from the subtasks (span and duration-weighted average) and cannot be \
edited directly.
- **Dependencies**: only top-level tasks carry them. After every change, tasks \
are pushed to start the day after their latest dependency ends. Dependencies that \
would form a cycle are rejected.
- **Status**: "auto" by default, derived on read: Complete at 100%, Delayed when \
past the end date, At Risk when due within a few days and under 75%, otherwise \
On Track. A status can also be pinned explicitly.

Typical workflow:
1. add_task / add_subtasks to build the tree
2. update_task to change dates, completion, dependencies or status
3. list_tasks or get_task to read the recalculated schedule
4. get_report for at-risk, upcoming and milestone summaries
5. set_baseline, then get_variance to track slippage\
""",
)


def _get_store() -> Store:
    return Store()


def _task_to_dict(project: Project, t: Task) -> dict:
    """Convert a task to a JSON-friendly dict with its display status."""
    d = t.to_dict()
    d["display_status"] = display_status(t, utc_today(), project.config).value
    d["duration_days"] = difference_in_days(t.start_date, t.end_date) + 1
    d["is_parent"] = project.is_parent(t.id)
    return d


def _commit(store: Store, project: Project) -> str:
    report = project.recalculate()
    store.save(project)
    if report.aborted:
        edges = ", ".join(f"{u} -> {v}" for u, v in report.cycle or [])
        return f"\nWarning: circular dependency ({edges}); scheduling skipped."
    if report.shifts:
        return "\nRescheduled: " + ", ".join(
            f"{s.task_id} ({s.new_start} -> {s.new_end})" for s in report.shifts
        )
    return ""


# ---------------------------------------------------------------------------
# Write tools
# ---------------------------------------------------------------------------


@mcp.tool()
def add_task(
    name: str,
    start_date: str | None = None,
    end_date: str | None = None,
    parent_id: int | None = None,
    percent_complete: int = 0,
    dependencies: list[int] | None = None,
    resources: list[str] | None = None,
    notes: str | None = None,
) -> str:
    """Add a new task to the project.

    Args:
        name: Task name
        start_date: Start date (YYYY-MM-DD), defaults to today
        end_date: End date (YYYY-MM-DD), defaults to the start date
        parent_id: Parent task ID to create a subtask
        percent_complete: Completion 0-100
        dependencies: Task IDs this task depends on (top-level tasks only)
        resources: People or teams assigned
        notes: Free-form notes
    """
    store = _get_store()
    try:
        project = store.load()
        start = start_date or format_date(utc_today())
        task = project.add_task(
            name,
            start,
            end_date or start,
            parent_id=parent_id,
            percent_complete=percent_complete,
            dependencies=dependencies or [],
            resources=resources or [],
            notes=notes,
        )
    except GanttrError as e:
        return f"Error: {e}"
    return f"Added '{task.name}' as {task.id}" + _commit(store, project)


@mcp.tool()
def add_subtasks(parent_id: int, names: list[str]) -> str:
    """Add several subtasks under one parent, each starting on the parent's start date.

    Args:
        parent_id: Parent task ID
        names: Subtask names
    """
    store = _get_store()
    try:
        project = store.load()
        created = project.add_subtasks(parent_id, names)
    except GanttrError as e:
        return f"Error: {e}"
    ids = ", ".join(str(t.id) for t in created)
    return f"Added {len(created)} subtask(s): {ids}" + _commit(store, project)


@mcp.tool()
def update_task(
    task_id: int,
    name: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    percent_complete: int | None = None,
    dependencies: list[int] | None = None,
    status: str | None = None,
    notes: str | None = None,
) -> str:
    """Update fields of an existing task. Only provided fields are changed.

    Args:
        task_id: Task ID
        name: New name
        start_date: New start date (YYYY-MM-DD); not allowed on parent tasks
        end_date: New end date (YYYY-MM-DD); not allowed on parent tasks
        percent_complete: New completion 0-100; not allowed on parent tasks
        dependencies: Full replacement list of dependency task IDs
        status: "auto", "On Track", "At Risk", "Delayed" or "Complete"
        notes: New notes
    """
    store = _get_store()
    try:
        project = store.load()
        project.update_task(
            task_id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            percent_complete=percent_complete,
            dependencies=dependencies,
            status=status,
            notes=notes,
        )
    except GanttrError as e:
        return f"Error: {e}"
    return f"Updated {task_id}." + _commit(store, project)


@mcp.tool()
def move_task(task_id: int, days: int) -> str:
    """Shift a task by whole days, keeping its duration.

    Args:
        task_id: Task ID (must not be a parent task)
        days: Days to shift; negative moves earlier
    """
    store = _get_store()
    try:
        project = store.load()
        t = project.move_task(task_id, days)
    except GanttrError as e:
        return f"Error: {e}"
    return f"Moved {task_id} to {t.start_date} -> {t.end_date}." + _commit(store, project)


@mcp.tool()
def delete_task(task_id: int) -> str:
    """Delete a task with all its subtasks and remove it from dependency lists.

    Args:
        task_id: Task ID to delete
    """
    store = _get_store()
    try:
        project = store.load()
        removed = project.delete_task(task_id)
    except GanttrError as e:
        return f"Error: {e}"
    return f"Deleted {', '.join(str(r) for r in removed)}." + _commit(store, project)


@mcp.tool()
def set_baseline() -> str:
    """Snapshot the current schedule as the baseline for variance tracking."""
    store = _get_store()
    try:
        project = store.load()
    except GanttrError as e:
        return f"Error: {e}"
    project.set_baseline()
    store.save(project)
    return f"Baseline set for {len(project.baseline)} task(s)."


# ---------------------------------------------------------------------------
# Read tools
# ---------------------------------------------------------------------------


@mcp.tool()
def get_task(task_id: int) -> str:
    """Get full details for a task, including subtasks and dependents.

    Args:
        task_id: Task ID
    """
    try:
        project = _get_store().load()
        t = project.get(task_id)
    except GanttrError as e:
        return f"Error: {e}"
    d = _task_to_dict(project, t)
    d["subtasks"] = [c.id for c in project.children(task_id)]
    d["blocks"] = [x.id for x in project.dependents(task_id)]
    return json.dumps(d, indent=2)


@mcp.tool()
def list_tasks(search: str | None = None, status_filter: str | None = None) -> str:
    """List tasks in outline order with their display status.

    Args:
        search: Case-insensitive substring match on the name
        status_filter: Only tasks whose display status matches (e.g. "At Risk")
    """
    try:
        project = _get_store().load()
    except GanttrError as e:
        return f"Error: {e}"
    rows = []
    for t, depth in project.walk():
        d = _task_to_dict(project, t)
        if search and search.lower() not in t.name.lower():
            continue
        if status_filter and d["display_status"].lower() != status_filter.lower():
            continue
        d["depth"] = depth
        rows.append(d)
    return json.dumps(rows, indent=2)


@mcp.tool()
def get_report(upcoming_days: int | None = None) -> str:
    """Project report: notifications, at-risk/overdue, upcoming deadlines, milestones.

    Args:
        upcoming_days: Window for upcoming deadlines (defaults to project setting)
    """
    try:
        project = _get_store().load()
    except GanttrError as e:
        return f"Error: {e}"
    now = utc_today()
    days = upcoming_days if upcoming_days is not None else project.config.upcoming_days
    result = {
        "project": project.config.name,
        "today": format_date(now),
        "notifications": [n.message for n in notifications(project.tasks, now, project.config)],
        "at_risk_and_overdue": [t.id for t in at_risk_and_overdue(project.tasks, now, project.config)],
        "upcoming": [t.id for t in upcoming(project.tasks, now, days)],
        "milestones": [{"id": m.task.id, "date": m.task.end_date, "state": m.state} for m in milestones(project.tasks, now)],
    }
    return json.dumps(result, indent=2)


@mcp.tool()
def get_variance() -> str:
    """Start/end slip in days of every task against the baseline."""
    try:
        project = _get_store().load()
    except GanttrError as e:
        return f"Error: {e}"
    if not project.baseline:
        return "No baseline set. Use set_baseline first."
    rows = [
        {"id": v.task_id, "name": v.name, "start_slip": v.start_slip, "end_slip": v.end_slip}
        for v in baseline_variance(project.tasks, project.baseline)
    ]
    return json.dumps(rows, indent=2)


def main():
    """Entry point for the MCP server."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
