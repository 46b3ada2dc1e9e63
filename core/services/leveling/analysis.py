from __future__ import annotations

from core.services.leveling.cancellation import CancelToken
from core.services.leveling.detection import detect_conflicts
from core.services.leveling.load import summarize_resource_load
from core.services.leveling.models import LevelingAnalysis
from core.services.leveling.policy import LevelingPolicy, LevelingStrategy
from core.services.leveling.recommender import build_recommendations
from core.services.snapshot.models import ScheduleSnapshot


def analyze(
    snapshot: ScheduleSnapshot,
    strategy: LevelingStrategy | str = LevelingStrategy.BALANCED,
    *,
    policy: LevelingPolicy | None = None,
    resource_id: str | None = None,
    cancel_token: CancelToken | None = None,
    trace_id: str | None = None,
) -> LevelingAnalysis:
    """
    One full leveling pass over an immutable snapshot: detect conflicts,
    build recommendations, summarize resource load. Pure; the snapshot is
    never modified and nothing is written anywhere.
    """
    policy = policy or LevelingPolicy()
    strategy = LevelingStrategy.parse(strategy)

    conflicts = detect_conflicts(
        snapshot.resources,
        snapshot.tasks,
        resource_id=resource_id,
        max_workers=policy.max_workers,
        cancel_token=cancel_token,
    )
    if snapshot.project_id is not None:
        conflicts = [
            c for c in conflicts
            if snapshot.project_id in (c.task1.project_id, c.task2.project_id)
        ]
    recommendations = build_recommendations(
        conflicts,
        strategy,
        snapshot.tasks,
        snapshot.resources,
        snapshot.work_packages,
        policy=policy,
        cancel_token=cancel_token,
    )
    resources = snapshot.resources
    if resource_id is not None:
        resources = tuple(r for r in resources if r.id == resource_id)
    loads = summarize_resource_load(resources, snapshot.tasks, policy)

    return LevelingAnalysis(
        strategy=strategy,
        conflicts=tuple(conflicts),
        recommendations=tuple(recommendations),
        resource_loads=tuple(loads),
        trace_id=trace_id,
    )


__all__ = ["analyze"]
