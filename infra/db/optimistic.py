from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import update
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session

from core.exceptions import ConcurrencyError, NotFoundError, StoreUnavailableError


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Surface driver-level connection/lock failures as a retryable domain error."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        raise StoreUnavailableError(
            f"Entity store is unavailable while trying to {action}.",
            code="STORE_UNAVAILABLE",
        ) from exc


def update_with_version_check(
    session: Session,
    orm_type: type[Any],
    row_id: str,
    expected_version: int,
    values: dict[str, Any],
    *,
    not_found_message: str,
    stale_message: str,
    not_found_code: str = "NOT_FOUND",
) -> int:
    """Compare-and-set on `version`; returns the new version or raises."""
    next_version = int(expected_version) + 1
    stmt = (
        update(orm_type)
        .where(orm_type.id == row_id, orm_type.version == expected_version)
        .values(**values, version=next_version)
        .execution_options(synchronize_session=False)
    )
    with store_errors(f"update {orm_type.__tablename__}"):
        result = session.execute(stmt)
        if result.rowcount == 1:
            return next_version
        exists = session.get(orm_type, row_id) is not None

    if not exists:
        raise NotFoundError(not_found_message, code=not_found_code)
    raise ConcurrencyError(stale_message, code="STALE_WRITE")


__all__ = ["store_errors", "update_with_version_check"]
