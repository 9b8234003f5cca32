"""JSON file persistence for a project."""

from __future__ import annotations

import json
from pathlib import Path

from ganttr.exceptions import ValidationError
from ganttr.graph import check_hierarchy
from ganttr.models import ProjectConfig, Task
from ganttr.project import Project

DEFAULT_DB_FILE = "ganttr_project.json"


class Store:
    """Reads and writes the project database (JSON file)."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_FILE):
        self.db_path = Path(db_path)

    def load(self) -> Project:
        """Return the stored project, or an empty one if the file is missing."""
        if not self.db_path.exists():
            return Project()

        try:
            raw = json.loads(self.db_path.read_text())
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid project file {self.db_path}: {e}") from e
        if not isinstance(raw, dict) or not isinstance(raw.get("tasks"), list):
            raise ValidationError(f"Invalid project file format: {self.db_path}")

        config = ProjectConfig.from_dict(raw.get("config") or {})
        tasks: dict[int, Task] = {}
        for tdata in raw["tasks"]:
            task = Task.from_dict(tdata)
            tasks[task.id] = task
        check_hierarchy(tasks)

        baseline = {}
        for tdata in raw.get("baseline") or []:
            task = Task.from_dict(tdata)
            baseline[task.id] = task

        return Project(
            config=config,
            tasks=tasks,
            next_task_id=raw.get("next_task_id", 1),
            baseline=baseline,
        )

    def save(self, project: Project) -> None:
        """Persist config, tasks, id counter and baseline to disk."""
        raw = {
            "config": project.config.to_dict(),
            "next_task_id": project.next_task_id,
            "tasks": [t.to_dict() for t in project.tasks.values()],
            "baseline": [t.to_dict() for t in project.baseline.values()],
        }
        self.db_path.write_text(json.dumps(raw, indent=4))
