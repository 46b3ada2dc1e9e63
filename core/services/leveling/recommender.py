from __future__ import annotations

import logging
from collections import defaultdict
from datetime import timedelta
from typing import Iterable, Sequence

from core.domain import Resource, ResourceStatus, Task, TaskStatus, WorkPackage
from core.services.leveling.cancellation import CancelToken, check_cancelled
from core.services.leveling.detection import build_resource_task_index
from core.services.leveling.models import (
    DelayRecommendation,
    ReallocateRecommendation,
    Recommendation,
    ResourceConflict,
    SplitRecommendation,
)
from core.services.leveling.policy import LevelingPolicy, LevelingStrategy, Severity
from core.services.leveling.scoring import choose_delay_task

logger = logging.getLogger(__name__)

_REALLOCATABLE_STATUSES = (ResourceStatus.AVAILABLE, ResourceStatus.ASSIGNED)


def build_successors_map(tasks: Iterable[Task]) -> dict[str, set[str]]:
    """Predecessor id -> ids of tasks that still wait on it (completed successors excluded)."""
    successors: dict[str, set[str]] = defaultdict(set)
    for task in tasks:
        if task.status == TaskStatus.COMPLETED:
            continue
        for predecessor_id in task.predecessor_ids:
            successors[predecessor_id].add(task.id)
    return successors


def build_active_load_map(tasks: Iterable[Task]) -> dict[str, int]:
    load: dict[str, int] = defaultdict(int)
    for task in tasks:
        if task.is_terminal:
            continue
        for resource_id in task.assigned_resources | task.assigned_equipment:
            load[resource_id] += 1
    return load


class _RecommendationContext:
    """Lookups shared by every conflict in one recommendation pass."""

    def __init__(
        self,
        tasks: Sequence[Task],
        resources: Sequence[Resource],
        work_packages: Sequence[WorkPackage],
        policy: LevelingPolicy,
    ) -> None:
        self.policy = policy
        self.resources = sorted(resources, key=lambda r: r.id)
        self.resources_by_id = {r.id: r for r in resources}
        self.work_packages_by_id = {wp.id: wp for wp in work_packages}
        self.successors = build_successors_map(tasks)
        self.dated_tasks_by_resource = build_resource_task_index(tasks)
        self.active_load = build_active_load_map(tasks)

    def reallocation_candidates(self, conflicted: Resource, task: Task) -> list[Resource]:
        candidates: list[Resource] = []
        for resource in self.resources:
            if resource.id == conflicted.id or resource.type != conflicted.type:
                continue
            if resource.status not in _REALLOCATABLE_STATUSES:
                continue
            if task.uses_resource(resource.id):
                continue
            if not resource.has_skills(task.required_skills):
                continue
            if self._is_busy_during(resource.id, task):
                continue
            candidates.append(resource)
        candidates.sort(key=lambda r: (self.active_load.get(r.id, 0), r.id))
        return candidates

    def _is_busy_during(self, resource_id: str, task: Task) -> bool:
        for other in self.dated_tasks_by_resource.get(resource_id, ()):
            if other.id != task.id and other.overlaps(task):
                return True
        return False


def build_recommendations(
    conflicts: Iterable[ResourceConflict],
    strategy: LevelingStrategy | str,
    tasks: Sequence[Task],
    resources: Sequence[Resource],
    work_packages: Sequence[WorkPackage] = (),
    *,
    policy: LevelingPolicy | None = None,
    cancel_token: CancelToken | None = None,
) -> list[Recommendation]:
    """
    Turn detected conflicts into ranked recommendations.

    Each unordered task pair is handled once even when several shared
    resources put it in conflict. For every pair a Delay is always proposed;
    a Reallocate (and, for long tasks, a Split) follows when another
    resource of the same type is free for the delayed task's dates. The
    result is ordered most severe first and is stable for equal severities.
    """
    policy = policy or LevelingPolicy()
    strategy = LevelingStrategy.parse(strategy)
    ctx = _RecommendationContext(tasks, resources, work_packages, policy)

    seen_pairs: set[tuple[str, str]] = set()
    recommendations: list[Recommendation] = []
    for conflict in conflicts:
        check_cancelled(cancel_token)
        key = conflict.pair_key
        if key in seen_pairs:
            continue
        seen_pairs.add(key)
        recommendations.extend(_recommend_for_conflict(conflict, strategy, ctx))

    recommendations.sort(key=lambda rec: rec.severity.rank)
    logger.debug(
        "Built %s recommendation(s) for %s task pair(s) using %s strategy",
        len(recommendations),
        len(seen_pairs),
        strategy.value,
    )
    return recommendations


def _recommend_for_conflict(
    conflict: ResourceConflict,
    strategy: LevelingStrategy,
    ctx: _RecommendationContext,
) -> list[Recommendation]:
    policy = ctx.policy
    delay_task, keep_task = choose_delay_task(conflict.task1, conflict.task2, strategy, policy)

    delay = _build_delay(conflict, delay_task, keep_task, strategy, ctx)
    out: list[Recommendation] = [delay]

    resource = ctx.resources_by_id.get(conflict.resource_id)
    if resource is None:
        return out

    candidates = ctx.reallocation_candidates(resource, delay_task)
    if not candidates:
        return out

    best = candidates[0]
    out.append(
        ReallocateRecommendation(
            task=delay_task,
            from_resource=resource,
            to_resource=best,
            alternative_count=len(candidates),
            severity=delay.severity.lowered(),
            rationale=(
                f'Reassign "{delay_task.name}" from {resource.name} to {best.name} '
                f"({ctx.active_load.get(best.id, 0)} active task(s); "
                f"{len(candidates)} qualifying alternative(s))."
            ),
        )
    )

    if delay_task.effective_duration_days > policy.split_min_duration_days:
        out.append(
            SplitRecommendation(
                task=delay_task,
                primary_resource=resource,
                secondary_resource=best,
                severity=Severity.LOW,
                rationale=(
                    f'Split "{delay_task.name}" ({delay_task.effective_duration_days} days) '
                    f"between {resource.name} and {best.name} to work in parallel."
                ),
            )
        )
    return out


def _build_delay(
    conflict: ResourceConflict,
    delay_task: Task,
    keep_task: Task,
    strategy: LevelingStrategy,
    ctx: _RecommendationContext,
) -> DelayRecommendation:
    policy = ctx.policy
    delay_days = (keep_task.end_date - delay_task.start_date).days + policy.delay_buffer_days
    new_start = delay_task.start_date + timedelta(days=delay_days)
    new_end = delay_task.end_date + timedelta(days=delay_days)
    impacted = len(ctx.successors.get(delay_task.id, ()))

    violates_deadline = False
    deadline = None
    work_package = ctx.work_packages_by_id.get(delay_task.work_package_id or "")
    if work_package is not None and work_package.target_delivery is not None:
        deadline = work_package.target_delivery
        violates_deadline = new_end > deadline

    if violates_deadline:
        severity = Severity.CRITICAL
    else:
        severity = policy.overlap_severity(conflict.overlap_days)

    rationale = (
        f'Delay "{delay_task.name}" by {delay_days} day(s) so it starts after '
        f'"{keep_task.name}" ends ({strategy.value} strategy).'
    )
    if impacted:
        rationale += f" {impacted} downstream task(s) depend on it."
    if violates_deadline:
        rationale += f" New finish {new_end.isoformat()} misses work package delivery {deadline.isoformat()}."

    return DelayRecommendation(
        task=delay_task,
        resource_id=conflict.resource_id,
        delay_days=delay_days,
        new_start=new_start,
        new_end=new_end,
        impacted_successor_count=impacted,
        violates_deadline=violates_deadline,
        severity=severity,
        rationale=rationale,
    )


__all__ = [
    "build_successors_map",
    "build_active_load_map",
    "build_recommendations",
]
