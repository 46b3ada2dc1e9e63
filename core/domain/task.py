from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Iterable, Optional

from core.domain.enums import TaskPriority, TaskStatus
from core.domain.identifiers import generate_id


@dataclass(frozen=True)
class Task:
    id: str
    project_id: str
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration_days: Optional[int] = None
    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: TaskPriority = TaskPriority.MEDIUM
    is_critical: bool = False
    work_package_id: Optional[str] = None
    assigned_resources: frozenset[str] = field(default_factory=frozenset)
    assigned_equipment: frozenset[str] = field(default_factory=frozenset)
    predecessor_ids: frozenset[str] = field(default_factory=frozenset)
    required_skills: frozenset[str] = field(default_factory=frozenset)
    version: int = 1

    @staticmethod
    def create(
        project_id: str,
        name: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        assigned_resources: Iterable[str] = (),
        assigned_equipment: Iterable[str] = (),
        predecessor_ids: Iterable[str] = (),
        required_skills: Iterable[str] = (),
        **extra,
    ) -> "Task":
        duration = extra.pop("duration_days", None)
        if duration is None and start_date and end_date:
            duration = (end_date - start_date).days + 1
        return Task(
            id=generate_id(),
            project_id=project_id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            duration_days=duration,
            assigned_resources=frozenset(assigned_resources),
            assigned_equipment=frozenset(assigned_equipment),
            predecessor_ids=frozenset(predecessor_ids),
            required_skills=frozenset(required_skills),
            **extra,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def is_scheduled(self) -> bool:
        return self.start_date is not None and self.end_date is not None

    @property
    def span_days(self) -> int:
        if not self.is_scheduled:
            return 0
        return (self.end_date - self.start_date).days + 1

    @property
    def effective_duration_days(self) -> int:
        if self.duration_days is not None:
            return int(self.duration_days)
        return self.span_days

    def uses_resource(self, resource_id: str) -> bool:
        return resource_id in self.assigned_resources or resource_id in self.assigned_equipment

    def overlaps(self, other: "Task") -> bool:
        # Inclusive on both ends: sharing a single calendar day is an overlap.
        if not (self.is_scheduled and other.is_scheduled):
            return False
        return self.start_date <= other.end_date and other.start_date <= self.end_date

    def shifted(self, days: int) -> "Task":
        if not self.is_scheduled:
            return self
        delta = timedelta(days=days)
        return replace(self, start_date=self.start_date + delta, end_date=self.end_date + delta)


__all__ = ["Task"]
