"""Parent-task rollup: date span and duration-weighted completion."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field

import networkx as nx

from ganttr.dates import difference_in_days, format_date, parse_date
from ganttr.exceptions import HierarchyCycleError
from ganttr.graph import build_hierarchy
from ganttr.logger import get_logger
from ganttr.models import Task


@dataclass
class RollupReport:
    passes: int = 0
    changed: set[int] = field(default_factory=set)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def weighted_percent(children: list[Task]) -> int:
    """Completion of *children* weighted by inclusive duration in days.

    Children whose duration is not positive are left out; with nothing left
    the result is 0.
    """
    total_weighted = 0
    total_duration = 0
    for child in children:
        duration = difference_in_days(child.start_date, child.end_date) + 1
        if duration > 0:
            total_weighted += (child.percent_complete or 0) * duration
            total_duration += duration
    if total_duration == 0:
        return 0
    return _round_half_up(total_weighted / total_duration)


def _rollup_one(task: Task, children: list[Task]) -> bool:
    new_start = format_date(min(parse_date(c.start_date) for c in children))
    new_end = format_date(max(parse_date(c.end_date) for c in children))
    new_percent = weighted_percent(children)

    changed = False
    if task.start_date != new_start or task.end_date != new_end:
        task.start_date = new_start
        task.end_date = new_end
        changed = True
    if task.percent_complete != new_percent:
        task.percent_complete = new_percent
        changed = True
    return changed


def rollup(tasks: Mapping[int, Task]) -> RollupReport:
    """Recompute every parent from its children until nothing changes.

    Mutates *tasks* in place. Parents are visited children-first, but passes
    repeat until a full pass makes no change, so the result holds at any
    depth.
    """
    log = get_logger()
    H = build_hierarchy(tasks)
    try:
        bottom_up = list(reversed(list(nx.topological_sort(H))))
    except nx.NetworkXUnfeasible:
        raise HierarchyCycleError("Task hierarchy contains a cycle") from None

    parents = [tid for tid in bottom_up if H.out_degree(tid) > 0]
    report = RollupReport()

    changed = True
    while changed:
        changed = False
        report.passes += 1
        for tid in parents:
            children = [tasks[c] for c in H.successors(tid)]
            if _rollup_one(tasks[tid], children):
                changed = True
                report.changed.add(tid)
                log.debug(
                    "Parent %s -> %s..%s, %d%%",
                    tid,
                    tasks[tid].start_date,
                    tasks[tid].end_date,
                    tasks[tid].percent_complete,
                )

    log.debug("Rollup converged after %d pass(es)", report.passes)
    return report
