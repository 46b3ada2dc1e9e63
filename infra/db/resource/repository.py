from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.domain import Resource
from core.interfaces import ResourceRepository
from infra.db.models import ResourceORM
from infra.db.optimistic import store_errors
from infra.db.resource.mapper import resource_from_orm, resource_to_orm


class SqlAlchemyResourceRepository(ResourceRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, resource: Resource) -> None:
        self.session.add(resource_to_orm(resource))

    def get(self, resource_id: str) -> Optional[Resource]:
        with store_errors("load a resource"):
            obj = self.session.get(ResourceORM, resource_id)
        return resource_from_orm(obj) if obj else None

    def list_all(self) -> List[Resource]:
        stmt = select(ResourceORM).order_by(ResourceORM.id)
        with store_errors("list resources"):
            rows = self.session.execute(stmt).scalars().all()
        return [resource_from_orm(row) for row in rows]

    def existing_ids(self, resource_ids: Iterable[str]) -> set[str]:
        wanted = {rid for rid in resource_ids if rid}
        if not wanted:
            return set()
        stmt = select(ResourceORM.id).where(ResourceORM.id.in_(wanted))
        with store_errors("look up resources"):
            return set(self.session.execute(stmt).scalars().all())


__all__ = ["SqlAlchemyResourceRepository"]
