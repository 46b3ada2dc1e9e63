from __future__ import annotations

from core.domain import Project, WorkPackage
from infra.db.models import ProjectORM, WorkPackageORM


def project_to_orm(project: Project) -> ProjectORM:
    return ProjectORM(
        id=project.id,
        name=project.name,
        project_number=project.project_number,
        status=project.status,
        version=getattr(project, "version", 1),
    )


def project_from_orm(obj: ProjectORM) -> Project:
    return Project(
        id=obj.id,
        name=obj.name,
        project_number=obj.project_number or "",
        status=obj.status,
        version=getattr(obj, "version", 1),
    )


def work_package_to_orm(work_package: WorkPackage) -> WorkPackageORM:
    return WorkPackageORM(
        id=work_package.id,
        project_id=work_package.project_id,
        name=work_package.name,
        target_delivery=work_package.target_delivery,
        status=work_package.status,
        version=getattr(work_package, "version", 1),
    )


def work_package_from_orm(obj: WorkPackageORM) -> WorkPackage:
    return WorkPackage(
        id=obj.id,
        project_id=obj.project_id,
        name=obj.name,
        target_delivery=obj.target_delivery,
        status=obj.status,
        version=getattr(obj, "version", 1),
    )


__all__ = [
    "project_to_orm",
    "project_from_orm",
    "work_package_to_orm",
    "work_package_from_orm",
]
