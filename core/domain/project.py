from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from core.domain.enums import ProjectStatus, WorkPackageStatus
from core.domain.identifiers import generate_id


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    project_number: str = ""
    status: ProjectStatus = ProjectStatus.ACTIVE
    version: int = 1

    @staticmethod
    def create(name: str, project_number: str = "", **extra) -> "Project":
        return Project(
            id=generate_id(),
            name=name,
            project_number=project_number,
            **extra,
        )


@dataclass(frozen=True)
class WorkPackage:
    id: str
    project_id: str
    name: str
    target_delivery: Optional[date] = None
    status: WorkPackageStatus = WorkPackageStatus.PLANNED
    version: int = 1

    @staticmethod
    def create(
        project_id: str,
        name: str,
        target_delivery: Optional[date] = None,
        status: WorkPackageStatus = WorkPackageStatus.PLANNED,
    ) -> "WorkPackage":
        return WorkPackage(
            id=generate_id(),
            project_id=project_id,
            name=name,
            target_delivery=target_delivery,
            status=status,
        )


__all__ = ["Project", "WorkPackage"]
