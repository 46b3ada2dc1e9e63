from core.domain.enums import (
    AssignmentKind,
    ProjectStatus,
    ResourceStatus,
    ResourceType,
    TaskPriority,
    TaskStatus,
    WorkPackageStatus,
)
from core.domain.identifiers import generate_id, pair_key
from core.domain.project import Project, WorkPackage
from core.domain.resource import DEFAULT_MAX_CONCURRENT_ASSIGNMENTS, Resource
from core.domain.task import Task

__all__ = [
    "generate_id",
    "pair_key",
    "AssignmentKind",
    "ProjectStatus",
    "ResourceStatus",
    "ResourceType",
    "TaskPriority",
    "TaskStatus",
    "WorkPackageStatus",
    "DEFAULT_MAX_CONCURRENT_ASSIGNMENTS",
    "Project",
    "WorkPackage",
    "Resource",
    "Task",
]
