"""The task store: owns the collection and validates every edit before commit."""

from __future__ import annotations

import copy
from collections.abc import Iterable, Iterator

from ganttr.cycles import check_new_dependencies
from ganttr.dates import add_days, difference_in_days, format_date, parse_date
from ganttr.exceptions import (
    DerivedFieldError,
    InvalidDateRangeError,
    TaskNotFoundError,
    ValidationError,
)
from ganttr.graph import children_map, descendants
from ganttr.models import (
    ProjectConfig,
    StatusSetting,
    Task,
    parse_status_setting,
)
from ganttr.rollup import rollup
from ganttr.scheduler import ScheduleReport, schedule


def clamp_percent(value: int | float) -> int:
    return max(0, min(100, int(value)))


def _validate_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise ValidationError("Task name cannot be empty")
    return name


def _normalize_date(value: str) -> str:
    return format_date(parse_date(value))


def _clean_text(value: str | None) -> str | None:
    return value.strip() if value is not None else None


def _validate_range(start_date: str, end_date: str) -> None:
    if parse_date(start_date) > parse_date(end_date):
        raise InvalidDateRangeError(
            f"Start date {start_date} cannot be later than end date {end_date}"
        )


class Project:
    """A task collection plus the id counter, config and baseline that go with it.

    Engine passes (``schedule``, ``rollup``) only run when the caller asks
    for them through ``recalculate()``.
    """

    def __init__(
        self,
        config: ProjectConfig | None = None,
        tasks: dict[int, Task] | None = None,
        next_task_id: int = 1,
        baseline: dict[int, Task] | None = None,
    ):
        self.config = config or ProjectConfig()
        self.tasks: dict[int, Task] = tasks if tasks is not None else {}
        self.baseline: dict[int, Task] = baseline if baseline is not None else {}
        highest = max(self.tasks, default=0)
        self.next_task_id = max(next_task_id, highest + 1)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, task_id: int) -> Task:
        try:
            return self.tasks[task_id]
        except KeyError:
            raise TaskNotFoundError(task_id) from None

    def children(self, task_id: int) -> list[Task]:
        return [t for t in self.tasks.values() if t.parent_id == task_id]

    def is_parent(self, task_id: int) -> bool:
        return any(t.parent_id == task_id for t in self.tasks.values())

    def top_level(self) -> list[Task]:
        return [
            t
            for t in self.tasks.values()
            if t.parent_id is None or t.parent_id not in self.tasks
        ]

    def walk(self) -> Iterator[tuple[Task, int]]:
        """Yield (task, depth) in outline order: each task followed by its subtree."""
        kids = children_map(self.tasks)
        stack = [(t.id, 0) for t in reversed(self.top_level())]
        while stack:
            tid, depth = stack.pop()
            yield self.tasks[tid], depth
            stack.extend((c, depth + 1) for c in reversed(kids[tid]))

    def dependents(self, task_id: int) -> list[Task]:
        return [t for t in self.tasks.values() if task_id in t.dependencies]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _new_id(self) -> int:
        tid = self.next_task_id
        self.next_task_id += 1
        return tid

    def _validate_dependencies(self, task: Task, dependencies: Iterable[int]) -> list[int]:
        deps = list(dict.fromkeys(int(d) for d in dependencies))
        if not deps:
            return deps
        if task.is_subtask:
            raise ValidationError("Subtasks cannot have manual dependencies")
        below = descendants(self.tasks, task.id)
        for dep in deps:
            if dep not in self.tasks:
                raise TaskNotFoundError(dep)
            if dep == task.id:
                raise ValidationError("A task cannot depend on itself")
            if dep in below:
                raise ValidationError(
                    f"Task {task.id} cannot depend on its own subtask {dep}"
                )
        new_edges = [d for d in deps if d not in task.dependencies]
        check_new_dependencies(self.tasks, task.id, new_edges)
        return deps

    def add_task(
        self,
        name: str,
        start_date: str,
        end_date: str,
        parent_id: int | None = None,
        percent_complete: int = 0,
        dependencies: Iterable[int] = (),
        resources: Iterable[str] = (),
        description: str | None = None,
        notes: str | None = None,
        custom_fields: dict[str, str] | None = None,
    ) -> Task:
        """Create a task with automatic status and commit it to the collection."""
        name = _validate_name(name)
        start_date = _normalize_date(start_date)
        end_date = _normalize_date(end_date)
        _validate_range(start_date, end_date)
        if parent_id is not None and parent_id not in self.tasks:
            raise TaskNotFoundError(parent_id)

        task = Task(
            id=self.next_task_id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            parent_id=parent_id,
            percent_complete=clamp_percent(percent_complete),
            resources=[r.strip() for r in resources if r.strip()],
            description=_clean_text(description),
            notes=_clean_text(notes),
            custom_fields=dict(custom_fields or {}),
        )
        task.dependencies = self._validate_dependencies(task, dependencies)
        self._new_id()
        self.tasks[task.id] = task
        return task

    def add_subtasks(self, parent_id: int, names: Iterable[str]) -> list[Task]:
        """Bulk-add subtasks that start and end on the parent's start date."""
        parent = self.get(parent_id)
        cleaned = [n.strip() for n in names if n and n.strip()]
        if not cleaned:
            raise ValidationError("No valid subtask names given")
        start = parent.start_date
        return [self.add_task(n, start, start, parent_id=parent_id) for n in cleaned]

    def update_task(
        self,
        task_id: int,
        name: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        percent_complete: int | None = None,
        dependencies: Iterable[int] | None = None,
        status: StatusSetting | str | None = None,
        description: str | None = None,
        notes: str | None = None,
        resources: Iterable[str] | None = None,
        custom_fields: dict[str, str] | None = None,
    ) -> Task:
        """Apply an edit. Every check runs before anything is written."""
        task = self.get(task_id)
        is_parent = self.is_parent(task_id)

        new_name = _validate_name(name) if name is not None else task.name
        new_start = (
            _normalize_date(start_date) if start_date is not None else task.start_date
        )
        new_end = _normalize_date(end_date) if end_date is not None else task.end_date
        new_percent = (
            clamp_percent(percent_complete)
            if percent_complete is not None
            else task.percent_complete
        )

        if is_parent:
            if (new_start, new_end) != (task.start_date, task.end_date):
                raise DerivedFieldError(
                    "Parent task dates are calculated from their subtasks"
                )
            if new_percent != task.percent_complete:
                raise DerivedFieldError(
                    "Parent task completion is calculated from its subtasks"
                )
        _validate_range(new_start, new_end)

        new_deps = (
            self._validate_dependencies(task, dependencies)
            if dependencies is not None
            else task.dependencies
        )
        if isinstance(status, str):
            status = parse_status_setting(status)

        task.name = new_name
        task.start_date = new_start
        task.end_date = new_end
        task.percent_complete = new_percent
        task.dependencies = new_deps
        if status is not None:
            task.status = status
        if description is not None:
            task.description = _clean_text(description)
        if notes is not None:
            task.notes = _clean_text(notes)
        if resources is not None:
            task.resources = [r.strip() for r in resources if r.strip()]
        if custom_fields is not None:
            task.custom_fields = dict(custom_fields)
        return task

    def _require_leaf(self, task_id: int) -> Task:
        task = self.get(task_id)
        if self.is_parent(task_id):
            raise DerivedFieldError("Parent task dates are calculated from their subtasks")
        return task

    def move_task(self, task_id: int, delta_days: int) -> Task:
        """Shift a leaf task by whole days, keeping its duration."""
        task = self._require_leaf(task_id)
        if delta_days == 0:
            return task
        duration = difference_in_days(task.start_date, task.end_date)
        task.start_date = add_days(task.start_date, delta_days)
        task.end_date = add_days(task.start_date, duration)
        return task

    def resize_task(self, task_id: int, start_delta: int = 0, end_delta: int = 0) -> Task:
        """Move the start and/or end edge of a leaf task as a single edit."""
        task = self._require_leaf(task_id)
        if start_delta == 0 and end_delta == 0:
            return task
        new_start = add_days(task.start_date, start_delta)
        new_end = add_days(task.end_date, end_delta)
        _validate_range(new_start, new_end)
        task.start_date = new_start
        task.end_date = new_end
        return task

    def delete_task(self, task_id: int) -> list[int]:
        """Delete a task and its whole subtree. Returns the removed ids."""
        self.get(task_id)
        removed = {task_id} | descendants(self.tasks, task_id)
        for tid in removed:
            del self.tasks[tid]
        for task in self.tasks.values():
            if any(d in removed for d in task.dependencies):
                task.dependencies = [d for d in task.dependencies if d not in removed]
        return sorted(removed)

    def recalculate(self) -> ScheduleReport:
        """Run the scheduler, then the rollup."""
        report = schedule(self.tasks)
        rollup(self.tasks)
        return report

    def set_baseline(self) -> None:
        self.baseline = copy.deepcopy(self.tasks)
