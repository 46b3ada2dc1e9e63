from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from core.services.common.base import SupportEventSink
from core.services.leveling import LevelingPolicy, LevelingService, LevelingSession, ResolutionApplier
from core.services.snapshot import ScheduleSnapshotReader
from infra.db.repositories import (
    SqlAlchemyProjectRepository,
    SqlAlchemyResourceRepository,
    SqlAlchemyTaskRepository,
    SqlAlchemyWorkPackageRepository,
)


@dataclass(frozen=True)
class ServiceGraph:
    session: Session
    project_repo: SqlAlchemyProjectRepository
    resource_repo: SqlAlchemyResourceRepository
    task_repo: SqlAlchemyTaskRepository
    work_package_repo: SqlAlchemyWorkPackageRepository
    snapshot_reader: ScheduleSnapshotReader
    resolution_applier: ResolutionApplier
    leveling_service: LevelingService

    def open_leveling_session(self, project_id: str | None = None, strategy: Any = None) -> LevelingSession:
        return LevelingSession(self.leveling_service, project_id=project_id, strategy=strategy)

    def as_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "project_repo": self.project_repo,
            "resource_repo": self.resource_repo,
            "task_repo": self.task_repo,
            "work_package_repo": self.work_package_repo,
            "snapshot_reader": self.snapshot_reader,
            "resolution_applier": self.resolution_applier,
            "leveling_service": self.leveling_service,
        }


def build_service_graph(
    session: Session,
    *,
    policy: LevelingPolicy | None = None,
    support: SupportEventSink | None = None,
) -> ServiceGraph:
    """Wire repositories and leveling services onto one session. Policy defaults to the PM_LEVELING_* env."""
    project_repo = SqlAlchemyProjectRepository(session)
    resource_repo = SqlAlchemyResourceRepository(session)
    task_repo = SqlAlchemyTaskRepository(session)
    work_package_repo = SqlAlchemyWorkPackageRepository(session)

    snapshot_reader = ScheduleSnapshotReader(
        project_repo,
        task_repo,
        resource_repo,
        work_package_repo,
    )
    resolution_applier = ResolutionApplier(session, task_repo, support=support)
    leveling_service = LevelingService(
        session,
        snapshot_reader,
        resolution_applier,
        policy=policy if policy is not None else LevelingPolicy.from_env(),
        support=support,
    )

    return ServiceGraph(
        session=session,
        project_repo=project_repo,
        resource_repo=resource_repo,
        task_repo=task_repo,
        work_package_repo=work_package_repo,
        snapshot_reader=snapshot_reader,
        resolution_applier=resolution_applier,
        leveling_service=leveling_service,
    )


__all__ = ["ServiceGraph", "build_service_graph"]
