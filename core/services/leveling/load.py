from __future__ import annotations

from typing import Iterable, Sequence

from core.domain import Resource, Task
from core.services.leveling.models import LoadStatus, ResourceLoad
from core.services.leveling.policy import LevelingPolicy
from core.services.leveling.recommender import build_active_load_map


def summarize_resource_load(
    resources: Iterable[Resource],
    tasks: Sequence[Task],
    policy: LevelingPolicy | None = None,
) -> list[ResourceLoad]:
    """Active assignment count per resource against its concurrency limit, busiest first."""
    policy = policy or LevelingPolicy()
    active = build_active_load_map(tasks)
    loads: list[ResourceLoad] = []
    for resource in resources:
        capacity = resource.max_concurrent_assignments
        if capacity is None or capacity <= 0:
            capacity = policy.default_max_concurrent
        count = active.get(resource.id, 0)
        if count > capacity:
            status = LoadStatus.OVERALLOCATED
        elif count == 0:
            status = LoadStatus.UNDERUTILIZED
        else:
            status = LoadStatus.OPTIMAL
        loads.append(
            ResourceLoad(
                resource_id=resource.id,
                resource_name=resource.name,
                active_task_count=count,
                capacity=capacity,
                status=status,
            )
        )
    loads.sort(key=lambda load: (-load.utilization_percent, load.resource_name.lower(), load.resource_id))
    return loads


__all__ = ["summarize_resource_load"]
