from datetime import date

from ganttr.models import ProjectConfig, Task
from ganttr.reports import (
    at_risk_and_overdue,
    baseline_variance,
    milestones,
    notifications,
    upcoming,
)

TODAY = date(2024, 6, 10)


def _tasks() -> dict[int, Task]:
    tasks = [
        Task(1, "Late", "2024-06-01", "2024-06-05", percent_complete=40),
        Task(2, "Due soon", "2024-06-08", "2024-06-12", percent_complete=10),
        Task(3, "Due soon but nearly done", "2024-06-08", "2024-06-12", percent_complete=90),
        Task(4, "Next week", "2024-06-15", "2024-06-16"),
        Task(5, "Finished late", "2024-06-01", "2024-06-02", percent_complete=100),
        Task(6, "Kickoff", "2024-06-20", "2024-06-20"),
        Task(7, "Missed gate", "2024-06-03", "2024-06-03"),
    ]
    return {t.id: t for t in tasks}


def test_notifications():
    alerts = notifications(_tasks(), TODAY)
    kinds = {(n.kind, n.task_id) for n in alerts}
    assert kinds == {("overdue", 1), ("overdue", 7), ("due_soon", 2), ("due_soon", 3)}
    overdue = next(n for n in alerts if n.task_id == 1)
    assert overdue.message == 'Overdue: "Late" was due on 2024-06-05.'


def test_at_risk_and_overdue_lists_overdue_first():
    ids = [t.id for t in at_risk_and_overdue(_tasks(), TODAY)]
    assert ids == [1, 7, 2]


def test_upcoming_window():
    tasks = _tasks()
    assert [t.id for t in upcoming(tasks, TODAY, 7)] == [2, 3, 4]
    assert [t.id for t in upcoming(tasks, TODAY, 2)] == [2, 3]


def test_notifications_follow_config_window():
    config = ProjectConfig(at_risk_days=10)
    kinds = {(n.kind, n.task_id) for n in notifications(_tasks(), TODAY, config)}
    assert ("due_soon", 6) in kinds


def test_milestones():
    states = {m.task.id: m.state for m in milestones(_tasks(), TODAY)}
    assert states == {6: "Pending", 7: "Delayed"}


def test_baseline_variance():
    baseline = {
        1: Task(1, "Late", "2024-06-01", "2024-06-03"),
        9: Task(9, "Deleted since", "2024-06-01", "2024-06-03"),
    }
    rows = baseline_variance(_tasks(), baseline)
    assert len(rows) == 1
    assert (rows[0].task_id, rows[0].start_slip, rows[0].end_slip) == (1, 0, 2)
