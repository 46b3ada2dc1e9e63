from __future__ import annotations

import logging
from contextlib import nullcontext
from typing import Any, ContextManager, Mapping, Protocol

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session

from core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class SupportEventSink(Protocol):
    def emit_event(
        self,
        *,
        event_type: str,
        message: str,
        level: str = "INFO",
        trace_id: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> str: ...

    def trace(self, trace_id: str | None = None) -> ContextManager[str]: ...


class ServiceBase:
    def __init__(self, session: Session, support: SupportEventSink | None = None):
        self._session = session
        self._support = support

    def commit(self):
        try:
            self._session.commit()
        except (OperationalError, InterfaceError) as exc:
            self._session.rollback()
            raise StoreUnavailableError(
                "Entity store is unavailable; the change was not saved.",
                code="STORE_UNAVAILABLE",
            ) from exc
        except Exception:
            self._session.rollback()
            raise

    def rollback(self):
        self._session.rollback()

    def trace_scope(self, trace_id: str | None = None) -> ContextManager[str | None]:
        if self._support is None:
            return nullcontext(trace_id)
        return self._support.trace(trace_id)

    def record_event(
        self,
        event_type: str,
        message: str,
        *,
        level: str = "INFO",
        data: Mapping[str, Any] | None = None,
    ) -> None:
        if self._support is None:
            return
        try:
            self._support.emit_event(event_type=event_type, message=message, level=level, data=data)
        except OSError as exc:
            # Support log write failures never fail the caller.
            logger.warning("Could not record support event %s: %s", event_type, exc)


__all__ = ["ServiceBase", "SupportEventSink"]
