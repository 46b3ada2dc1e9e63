from __future__ import annotations

import logging

from core.exceptions import NotFoundError
from core.interfaces import ProjectRepository, ResourceRepository, TaskRepository, WorkPackageRepository
from core.services.snapshot.models import ScheduleSnapshot

logger = logging.getLogger(__name__)


class ScheduleSnapshotReader:
    """
    Builds the read-only ScheduleSnapshot an analysis pass runs against.

    A project-scoped read keeps every resource and every task assigned to
    any resource, whatever its project, plus the direct successors of
    those tasks. Cross-project conflicts, the busy check for reallocation
    candidates and the downstream impact count all need them. Analysis then
    reports only conflicts that touch the project.
    """

    def __init__(
        self,
        project_repo: ProjectRepository,
        task_repo: TaskRepository,
        resource_repo: ResourceRepository,
        work_package_repo: WorkPackageRepository,
    ):
        self._project_repo = project_repo
        self._task_repo = task_repo
        self._resource_repo = resource_repo
        self._work_package_repo = work_package_repo

    def read(self, project_id: str | None = None) -> ScheduleSnapshot:
        if project_id is None:
            return self._read_global()
        return self._read_project(project_id)

    def _read_global(self) -> ScheduleSnapshot:
        tasks = self._task_repo.list_all()
        snapshot = ScheduleSnapshot(
            tasks=tuple(sorted(tasks, key=lambda t: t.id)),
            resources=tuple(sorted(self._resource_repo.list_all(), key=lambda r: r.id)),
            projects=tuple(sorted(self._project_repo.list_all(), key=lambda p: p.id)),
            work_packages=tuple(sorted(self._work_package_repo.list_all(), key=lambda wp: wp.id)),
        )
        logger.debug("Read global snapshot: %s task(s), %s resource(s)", len(snapshot.tasks), len(snapshot.resources))
        return snapshot

    def _read_project(self, project_id: str) -> ScheduleSnapshot:
        if self._project_repo.get(project_id) is None:
            raise NotFoundError("Project not found.", code="PROJECT_NOT_FOUND")

        own_tasks = self._task_repo.list_by_project(project_id)
        resources = sorted(self._resource_repo.list_all(), key=lambda r: r.id)

        tasks_by_id = {task.id: task for task in own_tasks}
        if resources:
            for task in self._task_repo.list_by_resources(r.id for r in resources):
                tasks_by_id.setdefault(task.id, task)
        # Successors count toward downstream impact even when they hold no resources.
        for task in self._task_repo.list_successors_of(list(tasks_by_id)):
            tasks_by_id.setdefault(task.id, task)
        tasks = sorted(tasks_by_id.values(), key=lambda t: t.id)

        project_ids = {project_id} | {task.project_id for task in tasks}
        work_package_ids = {task.work_package_id for task in tasks if task.work_package_id}

        snapshot = ScheduleSnapshot(
            tasks=tuple(tasks),
            resources=tuple(resources),
            projects=tuple(sorted(self._project_repo.list_by_ids(project_ids), key=lambda p: p.id)),
            work_packages=tuple(
                sorted(self._work_package_repo.list_by_ids(work_package_ids), key=lambda wp: wp.id)
            ),
            project_id=project_id,
        )
        logger.debug(
            "Read snapshot for project %s: %s own task(s), %s task(s) from other projects",
            project_id,
            len(own_tasks),
            len(tasks) - len(own_tasks),
        )
        return snapshot


__all__ = ["ScheduleSnapshotReader"]
