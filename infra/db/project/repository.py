from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.domain import Project, WorkPackage
from core.interfaces import ProjectRepository, WorkPackageRepository
from infra.db.models import ProjectORM, WorkPackageORM
from infra.db.optimistic import store_errors
from infra.db.project.mapper import (
    project_from_orm,
    project_to_orm,
    work_package_from_orm,
    work_package_to_orm,
)


class SqlAlchemyProjectRepository(ProjectRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, project: Project) -> None:
        self.session.add(project_to_orm(project))

    def get(self, project_id: str) -> Optional[Project]:
        with store_errors("load a project"):
            obj = self.session.get(ProjectORM, project_id)
        return project_from_orm(obj) if obj else None

    def list_all(self) -> List[Project]:
        stmt = select(ProjectORM).order_by(ProjectORM.id)
        with store_errors("list projects"):
            rows = self.session.execute(stmt).scalars().all()
        return [project_from_orm(row) for row in rows]

    def list_by_ids(self, project_ids: Iterable[str]) -> List[Project]:
        ids = {pid for pid in project_ids if pid}
        if not ids:
            return []
        stmt = select(ProjectORM).where(ProjectORM.id.in_(ids)).order_by(ProjectORM.id)
        with store_errors("list projects"):
            rows = self.session.execute(stmt).scalars().all()
        return [project_from_orm(row) for row in rows]


class SqlAlchemyWorkPackageRepository(WorkPackageRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, work_package: WorkPackage) -> None:
        self.session.add(work_package_to_orm(work_package))

    def get(self, work_package_id: str) -> Optional[WorkPackage]:
        with store_errors("load a work package"):
            obj = self.session.get(WorkPackageORM, work_package_id)
        return work_package_from_orm(obj) if obj else None

    def list_all(self) -> List[WorkPackage]:
        stmt = select(WorkPackageORM).order_by(WorkPackageORM.id)
        with store_errors("list work packages"):
            rows = self.session.execute(stmt).scalars().all()
        return [work_package_from_orm(row) for row in rows]

    def list_by_ids(self, work_package_ids: Iterable[str]) -> List[WorkPackage]:
        ids = {wid for wid in work_package_ids if wid}
        if not ids:
            return []
        stmt = (
            select(WorkPackageORM)
            .where(WorkPackageORM.id.in_(ids))
            .order_by(WorkPackageORM.id)
        )
        with store_errors("list work packages"):
            rows = self.session.execute(stmt).scalars().all()
        return [work_package_from_orm(row) for row in rows]


__all__ = ["SqlAlchemyProjectRepository", "SqlAlchemyWorkPackageRepository"]
