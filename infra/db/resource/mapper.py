from __future__ import annotations

from core.domain import DEFAULT_MAX_CONCURRENT_ASSIGNMENTS, Resource
from infra.db.models import ResourceORM


def resource_to_orm(resource: Resource) -> ResourceORM:
    return ResourceORM(
        id=resource.id,
        name=resource.name,
        type=resource.type,
        status=resource.status,
        skills=sorted(resource.skills),
        max_concurrent_assignments=resource.max_concurrent_assignments,
        version=getattr(resource, "version", 1),
    )


def resource_from_orm(obj: ResourceORM) -> Resource:
    return Resource(
        id=obj.id,
        name=obj.name,
        type=obj.type,
        status=obj.status,
        skills=frozenset(obj.skills or ()),
        max_concurrent_assignments=(
            obj.max_concurrent_assignments
            if obj.max_concurrent_assignments is not None
            else DEFAULT_MAX_CONCURRENT_ASSIGNMENTS
        ),
        version=getattr(obj, "version", 1),
    )


__all__ = ["resource_to_orm", "resource_from_orm"]
