from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from core.domain import Task
from core.events.domain_events import domain_events
from core.exceptions import DomainError, ValidationError
from core.interfaces import TaskRepository
from core.services.common.base import ServiceBase, SupportEventSink
from core.services.leveling.models import (
    DelayRecommendation,
    ReallocateRecommendation,
    Recommendation,
    SplitRecommendation,
)

logger = logging.getLogger(__name__)


class ResolutionApplier(ServiceBase):
    """
    Executes one recommendation as exactly one task update.

    The write carries the task version the recommendation was computed
    from, so a task changed by someone else in the meantime is rejected
    with ConcurrencyError instead of being overwritten. Nothing is retried.
    """

    def __init__(
        self,
        session: Session,
        task_repo: TaskRepository,
        support: SupportEventSink | None = None,
    ):
        super().__init__(session, support)
        self._task_repo: TaskRepository = task_repo

    def apply(self, recommendation: Recommendation, expected_version: int | None = None) -> Task:
        task = recommendation.task
        version = task.version if expected_version is None else int(expected_version)
        try:
            updated = self._write(recommendation, version)
            self.commit()
        except DomainError as exc:
            self._session.rollback()
            logger.warning(
                "Could not apply %s recommendation to task %s: [%s] %s",
                recommendation.kind.value,
                task.id,
                exc.code,
                exc,
            )
            self.record_event(
                "leveling.recommendation.failed",
                f"{recommendation.kind.value} on task {task.id} rejected: {exc}",
                level="WARNING",
                data={"task_id": task.id, "kind": recommendation.kind.value, "code": exc.code},
            )
            raise
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "Applied %s recommendation to task %s (version %s -> %s)",
            recommendation.kind.value,
            task.id,
            version,
            updated.version,
        )
        self.record_event(
            "leveling.recommendation.applied",
            f"{recommendation.kind.value} applied to task {task.id}",
            data={"task_id": task.id, "kind": recommendation.kind.value, "version": updated.version},
        )
        domain_events.tasks_changed.emit(updated.project_id)
        domain_events.leveling_invalidated.emit(updated.project_id)
        return updated

    def _write(self, recommendation: Recommendation, version: int) -> Task:
        if isinstance(recommendation, DelayRecommendation):
            return self._task_repo.update_schedule(
                recommendation.task.id,
                version,
                recommendation.new_start,
                recommendation.new_end,
            )
        if isinstance(recommendation, ReallocateRecommendation):
            resources, equipment = _swap_assignment(
                recommendation.task,
                recommendation.from_resource.id,
                recommendation.to_resource.id,
                keep_original=False,
            )
            return self._task_repo.update_assignments(recommendation.task.id, version, resources, equipment)
        if isinstance(recommendation, SplitRecommendation):
            resources, equipment = _swap_assignment(
                recommendation.task,
                recommendation.primary_resource.id,
                recommendation.secondary_resource.id,
                keep_original=True,
            )
            return self._task_repo.update_assignments(recommendation.task.id, version, resources, equipment)
        raise ValidationError(
            f"Unsupported recommendation type: {type(recommendation).__name__}.",
            code="LEVELING_UNSUPPORTED_RECOMMENDATION",
        )


def _swap_assignment(
    task: Task,
    old_id: str,
    new_id: str,
    *,
    keep_original: bool,
) -> tuple[frozenset[str], frozenset[str]]:
    """Put new_id into every assignment set holding old_id, dropping old_id unless keep_original."""
    if not task.uses_resource(old_id):
        raise ValidationError(
            f"Resource {old_id} is no longer assigned to task {task.id}.",
            code="LEVELING_RESOURCE_NOT_ASSIGNED",
        )

    def _swap(ids: frozenset[str]) -> frozenset[str]:
        if old_id not in ids:
            return ids
        kept = ids if keep_original else ids - {old_id}
        return kept | {new_id}

    return _swap(task.assigned_resources), _swap(task.assigned_equipment)


__all__ = ["ResolutionApplier"]
