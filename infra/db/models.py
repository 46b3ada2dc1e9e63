# infra/db/models.py
from __future__ import annotations
from datetime import date
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from core.domain import (
    AssignmentKind,
    ProjectStatus,
    ResourceStatus,
    ResourceType,
    TaskPriority,
    TaskStatus,
    WorkPackageStatus,
)
from infra.db.base import Base


def _enum(enum_type) -> SAEnum:
    # Persist the lowercase values, not the member names.
    return SAEnum(enum_type, values_callable=lambda members: [m.value for m in members])


class ProjectORM(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    project_number: Mapped[str] = mapped_column(String(64), default="")
    status: Mapped[ProjectStatus] = mapped_column(
        _enum(ProjectStatus), default=ProjectStatus.ACTIVE, nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class WorkPackageORM(Base):
    __tablename__ = "work_packages"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    target_delivery: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[WorkPackageStatus] = mapped_column(
        _enum(WorkPackageStatus), default=WorkPackageStatus.PLANNED, nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
Index("idx_work_packages_project", WorkPackageORM.project_id)


class ResourceORM(Base):
    __tablename__ = "resources"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[ResourceType] = mapped_column(
        _enum(ResourceType), default=ResourceType.LABOR, nullable=False
    )
    status: Mapped[ResourceStatus] = mapped_column(
        _enum(ResourceStatus), default=ResourceStatus.AVAILABLE, nullable=False
    )
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    max_concurrent_assignments: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class TaskORM(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    work_package_id: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("work_packages.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    duration_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[TaskStatus] = mapped_column(
        _enum(TaskStatus), default=TaskStatus.NOT_STARTED, nullable=False
    )
    priority: Mapped[TaskPriority] = mapped_column(
        _enum(TaskPriority), default=TaskPriority.MEDIUM, nullable=False
    )
    is_critical: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    required_skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
Index("idx_tasks_project_id", TaskORM.project_id)
Index("idx_tasks_work_package", TaskORM.work_package_id)


class TaskResourceORM(Base):
    """One row per (task, resource) link; `kind` says which assignment set it belongs to."""

    __tablename__ = "task_resources"
    __table_args__ = (UniqueConstraint("task_id", "resource_id", "kind", name="uq_task_resource_kind"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    resource_id: Mapped[str] = mapped_column(
        String, ForeignKey("resources.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[AssignmentKind] = mapped_column(
        _enum(AssignmentKind), default=AssignmentKind.RESOURCE, nullable=False
    )
Index("idx_task_resources_task", TaskResourceORM.task_id)
Index("idx_task_resources_resource", TaskResourceORM.resource_id)


class TaskPredecessorORM(Base):
    __tablename__ = "task_predecessors"
    __table_args__ = (UniqueConstraint("task_id", "predecessor_id", name="uq_task_predecessor"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
    predecessor_id: Mapped[str] = mapped_column(
        String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False
    )
Index("idx_task_predecessors_task", TaskPredecessorORM.task_id)
Index("idx_task_predecessors_predecessor", TaskPredecessorORM.predecessor_id)
