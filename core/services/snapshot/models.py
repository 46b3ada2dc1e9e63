from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import cached_property

from core.domain import Project, Resource, Task, WorkPackage


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ScheduleSnapshot:
    """Immutable view of the entities one analysis pass works against."""

    tasks: tuple[Task, ...] = ()
    resources: tuple[Resource, ...] = ()
    projects: tuple[Project, ...] = ()
    work_packages: tuple[WorkPackage, ...] = ()
    project_id: str | None = None
    captured_at: datetime = field(default_factory=_utc_now, compare=False)

    @cached_property
    def tasks_by_id(self) -> dict[str, Task]:
        return {task.id: task for task in self.tasks}

    @cached_property
    def resources_by_id(self) -> dict[str, Resource]:
        return {resource.id: resource for resource in self.resources}

    @cached_property
    def projects_by_id(self) -> dict[str, Project]:
        return {project.id: project for project in self.projects}

    @cached_property
    def work_packages_by_id(self) -> dict[str, WorkPackage]:
        return {wp.id: wp for wp in self.work_packages}

    @property
    def is_empty(self) -> bool:
        return not self.tasks or not self.resources


__all__ = ["ScheduleSnapshot"]
