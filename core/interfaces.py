from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Protocol

from core.domain import Project, Resource, Task, WorkPackage


class ProjectRepository(Protocol):
    def add(self, project: Project) -> None: ...
    def get(self, project_id: str) -> Optional[Project]: ...
    def list_all(self) -> List[Project]: ...
    def list_by_ids(self, project_ids: Iterable[str]) -> List[Project]: ...


class ResourceRepository(Protocol):
    def add(self, resource: Resource) -> None: ...
    def get(self, resource_id: str) -> Optional[Resource]: ...
    def list_all(self) -> List[Resource]: ...
    def existing_ids(self, resource_ids: Iterable[str]) -> set[str]: ...


class WorkPackageRepository(Protocol):
    def add(self, work_package: WorkPackage) -> None: ...
    def get(self, work_package_id: str) -> Optional[WorkPackage]: ...
    def list_all(self) -> List[WorkPackage]: ...
    def list_by_ids(self, work_package_ids: Iterable[str]) -> List[WorkPackage]: ...


class TaskRepository(Protocol):
    """
    Read side feeds the snapshot reader; the two update methods are the
    only writes the leveling core performs.
    """

    def add(self, task: Task) -> None: ...
    def get(self, task_id: str) -> Optional[Task]: ...
    def list_all(self) -> List[Task]: ...
    def list_by_project(self, project_id: str) -> List[Task]: ...
    def list_by_resources(self, resource_ids: Iterable[str]) -> List[Task]: ...
    def list_successors_of(self, task_ids: Iterable[str]) -> List[Task]: ...

    def update_schedule(
        self,
        task_id: str,
        expected_version: int,
        start_date: date,
        end_date: date,
    ) -> Task: ...

    def update_assignments(
        self,
        task_id: str,
        expected_version: int,
        assigned_resources: frozenset[str],
        assigned_equipment: frozenset[str],
    ) -> Task: ...


__all__ = [
    "ProjectRepository",
    "ResourceRepository",
    "WorkPackageRepository",
    "TaskRepository",
]
