"""Cycle detection on the dependency graph."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import networkx as nx

from ganttr.exceptions import CircularDependencyError
from ganttr.graph import build_dependency_graph
from ganttr.models import Task


def would_create_cycle(
    tasks: Mapping[int, Task],
    task_id: int,
    proposed_dependency_id: int,
) -> bool:
    """True if making *task_id* depend on *proposed_dependency_id* closes a loop.

    Walks the proposed dependency's own dependencies transitively and checks
    whether *task_id* is among them. Existing cycles do not hang the walk.
    """
    if proposed_dependency_id not in tasks:
        return False
    G = build_dependency_graph(tasks)
    # Predecessors of a node are its dependencies, so ancestors are the
    # transitive dependency set.
    return task_id in nx.ancestors(G, proposed_dependency_id)


def find_dependency_cycle(tasks: Mapping[int, Task]) -> list[tuple[int, int]] | None:
    """Return the (predecessor, dependent) edges of one cycle, or None."""
    G = build_dependency_graph(tasks)
    try:
        return [(u, v) for u, v in nx.find_cycle(G)]
    except nx.NetworkXNoCycle:
        return None


def check_new_dependencies(
    tasks: Mapping[int, Task],
    task_id: int,
    dependency_ids: Iterable[int],
) -> None:
    """Raise CircularDependencyError for the first dependency that closes a loop."""
    for dep in dependency_ids:
        if would_create_cycle(tasks, task_id, dep):
            dep_name = tasks[dep].name
            task_name = tasks[task_id].name if task_id in tasks else str(task_id)
            raise CircularDependencyError(
                task_id,
                dep,
                f'Task "{dep_name}" already depends on "{task_name}"; '
                f"adding it as a dependency would create a cycle",
            )
