from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import ClassVar, Union

from core.domain import Resource, Task, pair_key
from core.services.leveling.policy import LevelingStrategy, Severity


class ConflictType(str, Enum):
    SAME_PROJECT = "same-project"
    CROSS_PROJECT = "cross-project"


class RecommendationKind(str, Enum):
    DELAY = "delay"
    REALLOCATE = "reallocate"
    SPLIT = "split"


class LoadStatus(str, Enum):
    OVERALLOCATED = "overallocated"
    OPTIMAL = "optimal"
    UNDERUTILIZED = "underutilized"


@dataclass(frozen=True)
class ResourceConflict:
    resource_id: str
    task1: Task
    task2: Task
    overlap_days: int
    conflict_type: ConflictType
    severity: Severity

    @property
    def pair_key(self) -> tuple[str, str]:
        return pair_key(self.task1.id, self.task2.id)

    @property
    def is_cross_project(self) -> bool:
        return self.conflict_type == ConflictType.CROSS_PROJECT


@dataclass(frozen=True)
class DelayRecommendation:
    kind: ClassVar[RecommendationKind] = RecommendationKind.DELAY

    task: Task
    resource_id: str
    delay_days: int
    new_start: date
    new_end: date
    impacted_successor_count: int
    violates_deadline: bool
    severity: Severity
    rationale: str


@dataclass(frozen=True)
class ReallocateRecommendation:
    kind: ClassVar[RecommendationKind] = RecommendationKind.REALLOCATE

    task: Task
    from_resource: Resource
    to_resource: Resource
    alternative_count: int
    severity: Severity
    rationale: str

    @property
    def resource_id(self) -> str:
        return self.from_resource.id


@dataclass(frozen=True)
class SplitRecommendation:
    kind: ClassVar[RecommendationKind] = RecommendationKind.SPLIT

    task: Task
    primary_resource: Resource
    secondary_resource: Resource
    severity: Severity
    rationale: str

    @property
    def resource_id(self) -> str:
        return self.primary_resource.id


Recommendation = Union[DelayRecommendation, ReallocateRecommendation, SplitRecommendation]


@dataclass(frozen=True)
class ResourceLoad:
    resource_id: str
    resource_name: str
    active_task_count: int
    capacity: int
    status: LoadStatus

    @property
    def utilization_percent(self) -> float:
        if self.capacity <= 0:
            return 0.0
        return 100.0 * self.active_task_count / self.capacity


@dataclass(frozen=True)
class LevelingAnalysis:
    strategy: LevelingStrategy
    conflicts: tuple[ResourceConflict, ...]
    recommendations: tuple[Recommendation, ...]
    resource_loads: tuple[ResourceLoad, ...] = ()
    trace_id: str | None = None

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def recommendations_for_task(self, task_id: str) -> list[Recommendation]:
        return [rec for rec in self.recommendations if rec.task.id == task_id]

    def conflicts_for_resource(self, resource_id: str) -> list[ResourceConflict]:
        return [c for c in self.conflicts if c.resource_id == resource_id]


__all__ = [
    "ConflictType",
    "RecommendationKind",
    "LoadStatus",
    "ResourceConflict",
    "DelayRecommendation",
    "ReallocateRecommendation",
    "SplitRecommendation",
    "Recommendation",
    "ResourceLoad",
    "LevelingAnalysis",
]
