from __future__ import annotations

from typing import Iterable

from core.domain import AssignmentKind, Task
from infra.db.models import TaskORM, TaskPredecessorORM, TaskResourceORM


def task_to_orm(task: Task) -> TaskORM:
    return TaskORM(
        id=task.id,
        project_id=task.project_id,
        work_package_id=task.work_package_id,
        name=task.name,
        start_date=task.start_date,
        end_date=task.end_date,
        duration_days=task.duration_days,
        status=task.status,
        priority=task.priority,
        is_critical=task.is_critical,
        required_skills=sorted(task.required_skills),
        version=getattr(task, "version", 1),
    )


def assignment_rows(task_id: str, resources: Iterable[str], equipment: Iterable[str]) -> list[TaskResourceORM]:
    rows = [
        TaskResourceORM(task_id=task_id, resource_id=rid, kind=AssignmentKind.RESOURCE)
        for rid in sorted(set(resources))
    ]
    rows.extend(
        TaskResourceORM(task_id=task_id, resource_id=rid, kind=AssignmentKind.EQUIPMENT)
        for rid in sorted(set(equipment))
    )
    return rows


def predecessor_rows(task_id: str, predecessor_ids: Iterable[str]) -> list[TaskPredecessorORM]:
    return [
        TaskPredecessorORM(task_id=task_id, predecessor_id=pid)
        for pid in sorted(set(predecessor_ids))
        if pid != task_id
    ]


def task_from_orm(
    obj: TaskORM,
    links: Iterable[TaskResourceORM] = (),
    predecessors: Iterable[TaskPredecessorORM] = (),
) -> Task:
    resources: set[str] = set()
    equipment: set[str] = set()
    for link in links:
        if link.kind == AssignmentKind.EQUIPMENT:
            equipment.add(link.resource_id)
        else:
            resources.add(link.resource_id)
    return Task(
        id=obj.id,
        project_id=obj.project_id,
        name=obj.name,
        start_date=obj.start_date,
        end_date=obj.end_date,
        duration_days=obj.duration_days,
        status=obj.status,
        priority=obj.priority,
        is_critical=bool(obj.is_critical),
        work_package_id=obj.work_package_id,
        assigned_resources=frozenset(resources),
        assigned_equipment=frozenset(equipment),
        predecessor_ids=frozenset(p.predecessor_id for p in predecessors),
        required_skills=frozenset(obj.required_skills or ()),
        version=getattr(obj, "version", 1),
    )


__all__ = ["assignment_rows", "predecessor_rows", "task_from_orm", "task_to_orm"]
