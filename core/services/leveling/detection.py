from __future__ import annotations

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Sequence

from core.domain import Resource, Task
from core.services.leveling.cancellation import CancelToken, check_cancelled
from core.services.leveling.models import ConflictType, ResourceConflict
from core.services.leveling.policy import Severity

logger = logging.getLogger(__name__)


def overlap_days(task1: Task, task2: Task) -> int:
    """Whole calendar days both intervals share; 0 when they are disjoint or undated."""
    if not task1.overlaps(task2):
        return 0
    start = max(task1.start_date, task2.start_date)
    end = min(task1.end_date, task2.end_date)
    return (end - start).days + 1


def build_resource_task_index(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    """Active, dated tasks per resource id, ordered by start date then id."""
    index: dict[str, list[Task]] = defaultdict(list)
    for task in tasks:
        if task.is_terminal or not task.is_scheduled:
            continue
        for resource_id in task.assigned_resources | task.assigned_equipment:
            index[resource_id].append(task)
    for bucket in index.values():
        bucket.sort(key=lambda t: (t.start_date, t.end_date, t.id))
    return index


def detect_resource_conflicts(resource_id: str, resource_tasks: Sequence[Task]) -> list[ResourceConflict]:
    conflicts: list[ResourceConflict] = []
    for i, task1 in enumerate(resource_tasks):
        for task2 in resource_tasks[i + 1:]:
            # Sorted by start: once task2 starts after task1 ends nothing later can overlap task1.
            if task2.start_date > task1.end_date:
                break
            days = overlap_days(task1, task2)
            if days <= 0:
                continue
            cross = task1.project_id != task2.project_id
            conflicts.append(
                ResourceConflict(
                    resource_id=resource_id,
                    task1=task1,
                    task2=task2,
                    overlap_days=days,
                    conflict_type=ConflictType.CROSS_PROJECT if cross else ConflictType.SAME_PROJECT,
                    severity=Severity.HIGH if cross else Severity.MEDIUM,
                )
            )
    return conflicts


def detect_conflicts(
    resources: Iterable[Resource],
    tasks: Iterable[Task],
    *,
    resource_id: str | None = None,
    max_workers: int = 1,
    batch_size: int = 32,
    cancel_token: CancelToken | None = None,
) -> list[ResourceConflict]:
    """
    Every pair of overlapping active tasks sharing a resource, once per resource.

    The per-resource scans are independent and may run on a thread pool;
    the cancel token is checked between batches of resources. The merged
    result does not depend on worker count.
    """
    index = build_resource_task_index(tasks)
    resource_ids = sorted(
        {r.id for r in resources if resource_id is None or r.id == resource_id}
    )
    work = [(rid, index[rid]) for rid in resource_ids if len(index.get(rid, ())) > 1]

    check_cancelled(cancel_token)
    batches = [work[i:i + batch_size] for i in range(0, len(work), max(1, batch_size))]
    results: list[list[ResourceConflict]] = []

    if max_workers <= 1 or len(work) <= 1:
        for batch in batches:
            for rid, resource_tasks in batch:
                results.append(detect_resource_conflicts(rid, resource_tasks))
            check_cancelled(cancel_token)
    else:
        workers = min(max_workers, len(work))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="leveling-detect") as pool:
            for batch in batches:
                futures = [pool.submit(detect_resource_conflicts, rid, ts) for rid, ts in batch]
                results.extend(f.result() for f in futures)
                check_cancelled(cancel_token)

    conflicts = [conflict for chunk in results for conflict in chunk]
    conflicts.sort(key=_conflict_sort_key)
    logger.debug(
        "Detected %s conflict(s) across %s resource(s) with shared assignments",
        len(conflicts),
        len(work),
    )
    return conflicts


def _conflict_sort_key(conflict: ResourceConflict):
    return (
        conflict.severity.rank,
        conflict.resource_id,
        conflict.task1.start_date,
        conflict.task2.start_date,
        conflict.task1.id,
        conflict.task2.id,
    )


__all__ = [
    "overlap_days",
    "build_resource_task_index",
    "detect_resource_conflicts",
    "detect_conflicts",
]
