"""Display status derived from completion and due-date proximity."""

from __future__ import annotations

from datetime import date, timedelta

from ganttr.dates import parse_date
from ganttr.models import ExplicitStatus, ProjectConfig, Status, Task

_DEFAULT_CONFIG = ProjectConfig()


def calculated_status(
    task: Task,
    today: date,
    config: ProjectConfig | None = None,
) -> Status:
    config = config or _DEFAULT_CONFIG
    if task.percent_complete == 100:
        return Status.COMPLETE

    end = parse_date(task.end_date)
    if end < today:
        return Status.DELAYED
    if (
        end <= today + timedelta(days=config.at_risk_days)
        and task.percent_complete < config.at_risk_threshold
    ):
        return Status.AT_RISK
    return Status.ON_TRACK


def display_status(
    task: Task,
    today: date,
    config: ProjectConfig | None = None,
) -> Status:
    """The stored status when pinned, otherwise the calculated one."""
    if isinstance(task.status, ExplicitStatus):
        return task.status.value
    return calculated_status(task, today, config)
