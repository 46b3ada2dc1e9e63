"""initial leveling schema: projects, work packages, resources, tasks and links

Revision ID: 4a1c0e7b9d20
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4a1c0e7b9d20"
down_revision = None
branch_labels = None
depends_on = None


def _version_column() -> sa.Column:
    return sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1"))


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name)


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("project_number", sa.String(length=64), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "status",
            _enum("projectstatus", "planned", "active", "on_hold", "completed"),
            nullable=False,
            server_default="active",
        ),
        _version_column(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "work_packages",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("target_delivery", sa.Date(), nullable=True),
        sa.Column(
            "status",
            _enum("workpackagestatus", "planned", "in_progress", "delivered", "on_hold"),
            nullable=False,
            server_default="planned",
        ),
        _version_column(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_work_packages_project", "work_packages", ["project_id"])

    op.create_table(
        "resources",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column(
            "type",
            _enum("resourcetype", "labor", "equipment", "subcontractor"),
            nullable=False,
            server_default="labor",
        ),
        sa.Column(
            "status",
            _enum("resourcestatus", "available", "assigned", "unavailable"),
            nullable=False,
            server_default="available",
        ),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("max_concurrent_assignments", sa.Integer(), nullable=False, server_default=sa.text("3")),
        _version_column(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("work_package_id", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("duration_days", sa.Integer(), nullable=True),
        sa.Column(
            "status",
            _enum("taskstatus", "not_started", "in_progress", "completed", "cancelled", "blocked", "on_hold"),
            nullable=False,
            server_default="not_started",
        ),
        sa.Column(
            "priority",
            _enum("taskpriority", "low", "medium", "high", "critical"),
            nullable=False,
            server_default="medium",
        ),
        sa.Column("is_critical", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("required_skills", sa.JSON(), nullable=False),
        _version_column(),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["work_package_id"], ["work_packages.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_tasks_project_id", "tasks", ["project_id"])
    op.create_index("idx_tasks_work_package", "tasks", ["work_package_id"])

    op.create_table(
        "task_resources",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("resource_id", sa.String(), nullable=False),
        sa.Column(
            "kind",
            _enum("assignmentkind", "resource", "equipment"),
            nullable=False,
            server_default="resource",
        ),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("task_id", "resource_id", "kind", name="uq_task_resource_kind"),
    )
    op.create_index("idx_task_resources_task", "task_resources", ["task_id"])
    op.create_index("idx_task_resources_resource", "task_resources", ["resource_id"])

    op.create_table(
        "task_predecessors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("predecessor_id", sa.String(), nullable=False),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["predecessor_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("task_id", "predecessor_id", name="uq_task_predecessor"),
    )
    op.create_index("idx_task_predecessors_task", "task_predecessors", ["task_id"])
    op.create_index("idx_task_predecessors_predecessor", "task_predecessors", ["predecessor_id"])


def downgrade() -> None:
    op.drop_index("idx_task_predecessors_predecessor", table_name="task_predecessors")
    op.drop_index("idx_task_predecessors_task", table_name="task_predecessors")
    op.drop_table("task_predecessors")
    op.drop_index("idx_task_resources_resource", table_name="task_resources")
    op.drop_index("idx_task_resources_task", table_name="task_resources")
    op.drop_table("task_resources")
    op.drop_index("idx_tasks_work_package", table_name="tasks")
    op.drop_index("idx_tasks_project_id", table_name="tasks")
    op.drop_table("tasks")
    op.drop_table("resources")
    op.drop_index("idx_work_packages_project", table_name="work_packages")
    op.drop_table("work_packages")
    op.drop_table("projects")
