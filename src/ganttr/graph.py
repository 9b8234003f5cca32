"""Dependency and hierarchy graphs built from a task collection."""

from __future__ import annotations

from collections.abc import Mapping

import networkx as nx

from ganttr.exceptions import HierarchyCycleError
from ganttr.models import Task


def build_dependency_graph(tasks: Mapping[int, Task]) -> nx.DiGraph:
    """Edges run from each predecessor to its dependents.

    References to ids outside *tasks* are skipped, so a subset of the
    collection can be scheduled on its own.
    """
    G = nx.DiGraph()
    for tid, task in tasks.items():
        G.add_node(tid, task=task)
    for tid, task in tasks.items():
        for dep in task.dependencies:
            if dep in tasks:
                G.add_edge(dep, tid)
    return G


def in_degree_map(G: nx.DiGraph) -> dict[int, int]:
    return {tid: deg for tid, deg in G.in_degree()}


def build_hierarchy(tasks: Mapping[int, Task]) -> nx.DiGraph:
    """Edges run from parent to child. Dangling parent ids count as top level."""
    H = nx.DiGraph()
    for tid, task in tasks.items():
        H.add_node(tid, task=task)
    for tid, task in tasks.items():
        if task.parent_id is not None and task.parent_id in tasks:
            H.add_edge(task.parent_id, tid)
    return H


def children_map(tasks: Mapping[int, Task]) -> dict[int, list[int]]:
    """Map every task id to its direct children, in collection order."""
    children: dict[int, list[int]] = {tid: [] for tid in tasks}
    for tid, task in tasks.items():
        if task.parent_id is not None and task.parent_id in children:
            children[task.parent_id].append(tid)
    return children


def leaf_ids(tasks: Mapping[int, Task]) -> set[int]:
    return {tid for tid, kids in children_map(tasks).items() if not kids}


def descendants(tasks: Mapping[int, Task], task_id: int) -> set[int]:
    """All ids below *task_id* in the parent tree."""
    if task_id not in tasks:
        return set()
    return nx.descendants(build_hierarchy(tasks), task_id)


def check_hierarchy(tasks: Mapping[int, Task]) -> None:
    """Raise HierarchyCycleError unless the parent relation is a forest."""
    H = build_hierarchy(tasks)
    try:
        cycle = nx.find_cycle(H)
    except nx.NetworkXNoCycle:
        return
    ids = " -> ".join(str(u) for u, _ in cycle)
    raise HierarchyCycleError(f"Task hierarchy contains a cycle: {ids}")
