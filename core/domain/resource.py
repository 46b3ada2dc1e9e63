from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from core.domain.enums import ResourceStatus, ResourceType
from core.domain.identifiers import generate_id

DEFAULT_MAX_CONCURRENT_ASSIGNMENTS = 3


@dataclass(frozen=True)
class Resource:
    id: str
    name: str
    type: ResourceType = ResourceType.LABOR
    status: ResourceStatus = ResourceStatus.AVAILABLE
    skills: frozenset[str] = field(default_factory=frozenset)
    max_concurrent_assignments: int = DEFAULT_MAX_CONCURRENT_ASSIGNMENTS
    version: int = 1

    @staticmethod
    def create(
        name: str,
        type: ResourceType = ResourceType.LABOR,
        status: ResourceStatus = ResourceStatus.AVAILABLE,
        skills: Iterable[str] = (),
        max_concurrent_assignments: int = DEFAULT_MAX_CONCURRENT_ASSIGNMENTS,
    ) -> "Resource":
        return Resource(
            id=generate_id(),
            name=name,
            type=type,
            status=status,
            skills=frozenset(skills),
            max_concurrent_assignments=max_concurrent_assignments,
        )

    def has_skills(self, required: Iterable[str]) -> bool:
        return set(required) <= self.skills


__all__ = ["Resource", "DEFAULT_MAX_CONCURRENT_ASSIGNMENTS"]
