"""Task model, status sum type and project settings."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from ganttr.exceptions import ValidationError


class Status(enum.StrEnum):
    ON_TRACK = "On Track"
    AT_RISK = "At Risk"
    DELAYED = "Delayed"
    COMPLETE = "Complete"


AUTO = "auto"


@dataclass(frozen=True)
class AutoStatus:
    """Derive the status from dates and completion on every read."""

    def __str__(self) -> str:
        return AUTO


@dataclass(frozen=True)
class ExplicitStatus:
    """A status pinned by the user; bypasses the classifier."""

    value: Status

    def __str__(self) -> str:
        return self.value.value


StatusSetting = AutoStatus | ExplicitStatus


def parse_status_setting(raw: str | None) -> StatusSetting:
    """Map ``"auto"`` (or nothing) to AutoStatus, a status label to ExplicitStatus.

    Labels are matched case-insensitively and may use underscores or
    hyphens for spaces (``at_risk``, ``on-track``).
    """
    if raw is None or raw.strip().lower() == AUTO:
        return AutoStatus()
    wanted = raw.strip().lower().replace("_", " ").replace("-", " ")
    for status in Status:
        if status.value.lower() == wanted:
            return ExplicitStatus(status)
    choices = ", ".join([AUTO, *(s.value for s in Status)])
    raise ValidationError(f"Invalid status {raw!r}. Use one of: {choices}")


@dataclass
class ProjectConfig:
    """Project-level settings stored alongside tasks."""

    name: str = ""
    description: str = ""
    start_date: str | None = None
    end_date: str | None = None
    at_risk_days: int = 3  # "due soon" window for the classifier
    at_risk_threshold: int = 75  # below this percent, a task due soon is At Risk
    upcoming_days: int = 7

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "at_risk_days": self.at_risk_days,
            "at_risk_threshold": self.at_risk_threshold,
            "upcoming_days": self.upcoming_days,
        }

    @classmethod
    def from_dict(cls, d: dict) -> ProjectConfig:
        return cls(
            name=d.get("name", ""),
            description=d.get("description", ""),
            start_date=d.get("start_date"),
            end_date=d.get("end_date"),
            at_risk_days=d.get("at_risk_days", 3),
            at_risk_threshold=d.get("at_risk_threshold", 75),
            upcoming_days=d.get("upcoming_days", 7),
        )


@dataclass
class Task:
    """A single task in the project tree."""

    id: int
    name: str
    start_date: str
    end_date: str
    parent_id: int | None = None
    percent_complete: int = 0
    dependencies: list[int] = field(default_factory=list)
    status: StatusSetting = field(default_factory=AutoStatus)
    description: str | None = None
    notes: str | None = None
    resources: list[str] = field(default_factory=list)
    custom_fields: dict[str, str] = field(default_factory=dict)

    @property
    def is_subtask(self) -> bool:
        return self.parent_id is not None

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "name": self.name,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "parent_id": self.parent_id,
            "percent_complete": self.percent_complete,
            "dependencies": list(self.dependencies),
            "status": str(self.status),
            "resources": list(self.resources),
            "custom_fields": dict(self.custom_fields),
        }
        if self.description is not None:
            d["description"] = self.description
        if self.notes is not None:
            d["notes"] = self.notes
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Task:
        return cls(
            id=int(d["id"]),
            name=d["name"],
            start_date=d["start_date"],
            end_date=d["end_date"],
            parent_id=d.get("parent_id"),
            percent_complete=d.get("percent_complete", 0) or 0,
            dependencies=[int(x) for x in d.get("dependencies") or []],
            status=parse_status_setting(d.get("status")),
            description=d.get("description"),
            notes=d.get("notes"),
            resources=list(d.get("resources") or []),
            custom_fields=dict(d.get("custom_fields") or {}),
        )
