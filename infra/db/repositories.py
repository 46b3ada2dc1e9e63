# infra/db/repositories.py
from infra.db.project.repository import SqlAlchemyProjectRepository, SqlAlchemyWorkPackageRepository
from infra.db.resource.repository import SqlAlchemyResourceRepository
from infra.db.task.repository import SqlAlchemyTaskRepository

__all__ = [
    "SqlAlchemyProjectRepository",
    "SqlAlchemyResourceRepository",
    "SqlAlchemyTaskRepository",
    "SqlAlchemyWorkPackageRepository",
]
