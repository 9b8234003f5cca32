"""Finish-to-start scheduling over the dependency DAG."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import networkx as nx

from ganttr.cycles import find_dependency_cycle
from ganttr.dates import add_days, difference_in_days, format_date, parse_date
from ganttr.graph import build_dependency_graph, leaf_ids
from ganttr.logger import get_logger
from ganttr.models import Task


@dataclass
class Shift:
    """A leaf task pushed later by its predecessors."""

    task_id: int
    old_start: str
    old_end: str
    new_start: str
    new_end: str

    @property
    def days(self) -> int:
        return difference_in_days(self.old_start, self.new_start)


@dataclass
class ScheduleReport:
    """Outcome of one scheduling pass."""

    shifts: list[Shift] = field(default_factory=list)
    cycle: list[tuple[int, int]] | None = None

    @property
    def aborted(self) -> bool:
        return self.cycle is not None

    @property
    def changed(self) -> bool:
        return bool(self.shifts)


def topological_order(tasks: Mapping[int, Task]) -> list[int] | None:
    """Task ids in dependency order, or None if the dependencies contain a cycle."""
    G = build_dependency_graph(tasks)
    try:
        return list(nx.topological_sort(G))
    except nx.NetworkXUnfeasible:
        return None


def schedule(tasks: Mapping[int, Task]) -> ScheduleReport:
    """Push every leaf task to start the day after its latest predecessor ends.

    Mutates *tasks* in place. A task only ever moves later, and keeps its
    duration. If the dependency graph has a cycle nothing is changed and the
    returned report carries the offending edges.
    """
    log = get_logger()
    report = ScheduleReport()

    order = topological_order(tasks)
    if order is None:
        report.cycle = find_dependency_cycle(tasks) or []
        edges = ", ".join(f"{u} -> {v}" for u, v in report.cycle)
        log.error("Circular dependency detected (%s). Auto-scheduling halted.", edges)
        return report

    leaves = leaf_ids(tasks)
    for tid in order:
        if tid not in leaves:
            continue
        task = tasks[tid]
        if not task.dependencies:
            continue

        predecessor_ends = [
            parse_date(tasks[dep].end_date) for dep in task.dependencies if dep in tasks
        ]
        if not predecessor_ends:
            continue

        new_start = add_days(format_date(max(predecessor_ends)), 1)
        if parse_date(new_start) <= parse_date(task.start_date):
            continue

        duration = difference_in_days(task.start_date, task.end_date)
        shift = Shift(
            task_id=tid,
            old_start=task.start_date,
            old_end=task.end_date,
            new_start=new_start,
            new_end=add_days(new_start, duration),
        )
        task.start_date = shift.new_start
        task.end_date = shift.new_end
        report.shifts.append(shift)
        log.changes(
            "Task %s '%s' moved %s -> %s (%+d days)",
            tid,
            task.name,
            shift.old_start,
            shift.new_start,
            shift.days,
        )

    log.info("Scheduling pass shifted %d task(s)", len(report.shifts))
    return report
