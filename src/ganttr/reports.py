"""Project reports: notifications, deadline lists, milestones, baseline variance."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, timedelta

from ganttr.dates import difference_in_days, parse_date
from ganttr.models import ProjectConfig, Status, Task
from ganttr.status import calculated_status


@dataclass
class Notification:
    kind: str  # "overdue" or "due_soon"
    task_id: int
    message: str


@dataclass
class Milestone:
    task: Task
    state: str  # "Complete", "Delayed" or "Pending"


@dataclass
class Variance:
    """Slip of a task against its baseline copy, in days (positive = later)."""

    task_id: int
    name: str
    baseline_start: str
    baseline_end: str
    start_slip: int
    end_slip: int


def notifications(
    tasks: Mapping[int, Task],
    today: date,
    config: ProjectConfig | None = None,
) -> list[Notification]:
    """Overdue and due-soon alerts for incomplete tasks."""
    config = config or ProjectConfig()
    soon = today + timedelta(days=config.at_risk_days)
    out: list[Notification] = []
    for task in tasks.values():
        if task.percent_complete >= 100:
            continue
        end = parse_date(task.end_date)
        if end < today:
            out.append(
                Notification(
                    "overdue", task.id, f'Overdue: "{task.name}" was due on {task.end_date}.'
                )
            )
        elif end <= soon:
            out.append(
                Notification(
                    "due_soon", task.id, f'Due soon: "{task.name}" is due on {task.end_date}.'
                )
            )
    return out


def at_risk_and_overdue(
    tasks: Mapping[int, Task],
    today: date,
    config: ProjectConfig | None = None,
) -> list[Task]:
    """Overdue incomplete tasks first, then the remaining At Risk ones."""
    overdue = [
        t for t in tasks.values() if parse_date(t.end_date) < today and t.percent_complete < 100
    ]
    seen = {t.id for t in overdue}
    at_risk = [
        t
        for t in tasks.values()
        if t.id not in seen and calculated_status(t, today, config) == Status.AT_RISK
    ]
    return overdue + at_risk


def upcoming(tasks: Mapping[int, Task], today: date, days: int = 7) -> list[Task]:
    """Incomplete tasks ending between today and *days* from now, inclusive."""
    horizon = today + timedelta(days=days)
    return [
        t
        for t in tasks.values()
        if today <= parse_date(t.end_date) <= horizon and t.percent_complete < 100
    ]


def milestones(tasks: Mapping[int, Task], today: date) -> list[Milestone]:
    """Zero-duration tasks with a simple completion state."""
    out = []
    for t in tasks.values():
        if difference_in_days(t.start_date, t.end_date) != 0:
            continue
        if t.percent_complete == 100:
            state = "Complete"
        elif parse_date(t.end_date) < today:
            state = "Delayed"
        else:
            state = "Pending"
        out.append(Milestone(t, state))
    return out


def baseline_variance(
    tasks: Mapping[int, Task],
    baseline: Mapping[int, Task],
) -> list[Variance]:
    """Compare current dates with the baseline for tasks present in both."""
    out = []
    for tid, task in tasks.items():
        base = baseline.get(tid)
        if base is None:
            continue
        out.append(
            Variance(
                task_id=tid,
                name=task.name,
                baseline_start=base.start_date,
                baseline_end=base.end_date,
                start_slip=difference_in_days(base.start_date, task.start_date),
                end_slip=difference_in_days(base.end_date, task.end_date),
            )
        )
    return out
