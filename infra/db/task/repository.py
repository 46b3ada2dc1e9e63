from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from core.domain import Task
from core.exceptions import NotFoundError, ValidationError
from core.interfaces import TaskRepository
from infra.db.models import ResourceORM, TaskORM, TaskPredecessorORM, TaskResourceORM
from infra.db.optimistic import store_errors, update_with_version_check
from infra.db.task.mapper import assignment_rows, predecessor_rows, task_from_orm, task_to_orm


def _check_dates(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValidationError(
            f"Task end date {end_date.isoformat()} is before its start date {start_date.isoformat()}.",
            code="TASK_INVALID_DATES",
        )


class SqlAlchemyTaskRepository(TaskRepository):
    """
    Tasks with their resource/equipment links and predecessor links.

    Both update methods are compare-and-set on `version`: a caller holding
    an older version gets ConcurrencyError and nothing is written.
    """

    def __init__(self, session: Session):
        self.session = session

    # ---- writes ----------------------------------------------------------

    def add(self, task: Task) -> None:
        _check_dates(task.start_date, task.end_date)
        self._check_known_resources(task.assigned_resources | task.assigned_equipment)
        with store_errors("add a task"):
            self.session.add(task_to_orm(task))
            # Link rows reference the task row.
            self.session.flush()
            self.session.add_all(
                assignment_rows(task.id, task.assigned_resources, task.assigned_equipment)
            )
            self.session.add_all(predecessor_rows(task.id, task.predecessor_ids))
            self.session.flush()

    def update_schedule(
        self,
        task_id: str,
        expected_version: int,
        start_date: date,
        end_date: date,
    ) -> Task:
        _check_dates(start_date, end_date)
        update_with_version_check(
            self.session,
            TaskORM,
            task_id,
            expected_version,
            {"start_date": start_date, "end_date": end_date},
            not_found_message=f"Task {task_id} not found.",
            stale_message="Task was updated by another user.",
            not_found_code="TASK_NOT_FOUND",
        )
        return self._reload(task_id)

    def update_assignments(
        self,
        task_id: str,
        expected_version: int,
        assigned_resources: frozenset[str],
        assigned_equipment: frozenset[str],
    ) -> Task:
        self._check_known_resources(set(assigned_resources) | set(assigned_equipment))
        update_with_version_check(
            self.session,
            TaskORM,
            task_id,
            expected_version,
            {},
            not_found_message=f"Task {task_id} not found.",
            stale_message="Task was updated by another user.",
            not_found_code="TASK_NOT_FOUND",
        )
        with store_errors("replace task assignments"):
            self.session.execute(delete(TaskResourceORM).where(TaskResourceORM.task_id == task_id))
            self.session.add_all(assignment_rows(task_id, assigned_resources, assigned_equipment))
            self.session.flush()
        return self._reload(task_id)

    # ---- reads -----------------------------------------------------------

    def get(self, task_id: str) -> Optional[Task]:
        with store_errors("load a task"):
            obj = self.session.get(TaskORM, task_id)
        if obj is None:
            return None
        return self._to_domain([obj])[0]

    def list_all(self) -> List[Task]:
        return self._select(select(TaskORM))

    def list_by_project(self, project_id: str) -> List[Task]:
        return self._select(select(TaskORM).where(TaskORM.project_id == project_id))

    def list_by_resources(self, resource_ids: Iterable[str]) -> List[Task]:
        ids = {rid for rid in resource_ids if rid}
        if not ids:
            return []
        linked = (
            select(TaskResourceORM.task_id)
            .where(TaskResourceORM.resource_id.in_(ids))
            .distinct()
        )
        return self._select(select(TaskORM).where(TaskORM.id.in_(linked)))

    def list_successors_of(self, task_ids: Iterable[str]) -> List[Task]:
        ids = {tid for tid in task_ids if tid}
        if not ids:
            return []
        waiting = (
            select(TaskPredecessorORM.task_id)
            .where(TaskPredecessorORM.predecessor_id.in_(ids))
            .distinct()
        )
        return self._select(select(TaskORM).where(TaskORM.id.in_(waiting)))

    # ---- helpers ---------------------------------------------------------

    def _check_known_resources(self, resource_ids: Iterable[str]) -> None:
        wanted = {rid for rid in resource_ids if rid}
        if not wanted:
            return
        stmt = select(ResourceORM.id).where(ResourceORM.id.in_(wanted))
        with store_errors("look up resources"):
            known = set(self.session.execute(stmt).scalars().all())
        missing = sorted(wanted - known)
        if missing:
            raise ValidationError(
                f"Unknown resource id(s): {', '.join(missing)}.",
                code="TASK_UNKNOWN_RESOURCE",
            )

    def _reload(self, task_id: str) -> Task:
        with store_errors("load a task"):
            obj = self.session.get(TaskORM, task_id, populate_existing=True)
        if obj is None:
            raise NotFoundError(f"Task {task_id} not found.", code="TASK_NOT_FOUND")
        return self._to_domain([obj])[0]

    def _select(self, stmt) -> List[Task]:
        with store_errors("list tasks"):
            rows = self.session.execute(stmt.order_by(TaskORM.id)).scalars().all()
        return self._to_domain(rows)

    def _to_domain(self, rows: Sequence[TaskORM]) -> List[Task]:
        if not rows:
            return []
        ids = [row.id for row in rows]
        links: dict[str, list[TaskResourceORM]] = defaultdict(list)
        preds: dict[str, list[TaskPredecessorORM]] = defaultdict(list)
        with store_errors("load task links"):
            for link in self.session.execute(
                select(TaskResourceORM).where(TaskResourceORM.task_id.in_(ids))
            ).scalars():
                links[link.task_id].append(link)
            for pred in self.session.execute(
                select(TaskPredecessorORM).where(TaskPredecessorORM.task_id.in_(ids))
            ).scalars():
                preds[pred.task_id].append(pred)
        return [task_from_orm(row, links.get(row.id, ()), preds.get(row.id, ())) for row in rows]


__all__ = ["SqlAlchemyTaskRepository"]
