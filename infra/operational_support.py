from __future__ import annotations

import json
import logging
import os
import re
import sys
import threading
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Mapping

from infra.path import user_data_dir
from infra.version import get_app_version

MASK = "***"

_TRACE_ID_CTX: ContextVar[str | None] = ContextVar("leveling_trace_id", default=None)
# user:password@ in a store URL (PM_DB_URL) echoed by a driver error or a stack.
_STORE_URL_PASSWORD = re.compile(r"(?P<prefix>\b[a-z][a-z0-9+.\-]*://[^/@\s:]+):[^/@\s]+@", re.IGNORECASE)


def create_trace_id() -> str:
    return "lvl-{}-{}".format(datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S"), uuid.uuid4().hex[:8])


def current_trace_id() -> str | None:
    return (_TRACE_ID_CTX.get() or "").strip() or None


@contextmanager
def bind_trace_id(trace_id: str | None = None) -> Iterator[str]:
    """Bind a trace id for the current context; nested scopes reuse the outer id unless given one."""
    bound = (trace_id or "").strip() or current_trace_id() or create_trace_id()
    token = _TRACE_ID_CTX.set(bound)
    try:
        yield bound
    finally:
        _TRACE_ID_CTX.reset(token)


def mask_store_credentials(text: str) -> str:
    return _STORE_URL_PASSWORD.sub(lambda m: f"{m.group('prefix')}:{MASK}@", str(text or ""))


def to_event_data(value: Any) -> Any:
    """Shape leveling values (enums, dates, id sets, dataclasses) into JSON; strings are masked."""
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return to_event_data(asdict(value))
    if isinstance(value, Mapping):
        return {str(key): to_event_data(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(to_event_data(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [to_event_data(item) for item in value]
    return mask_store_credentials(str(value))


class TraceIdLogFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = current_trace_id() or "-"
        return True


class OperationalSupport:
    """Append-only JSON-lines log of leveling support events (analysis runs, applies, crashes)."""

    def __init__(self, events_path: str | Path | None = None) -> None:
        self._events_path = Path(events_path or user_data_dir() / "logs" / "support-events.jsonl")
        self._events_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def events_path(self) -> Path:
        return self._events_path

    def trace(self, trace_id: str | None = None):
        return bind_trace_id(trace_id)

    def emit_event(
        self,
        *,
        event_type: str,
        message: str,
        level: str = "INFO",
        trace_id: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> str:
        resolved = (trace_id or current_trace_id() or create_trace_id()).strip()
        record = {
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type.strip() or "support.event",
            "level": level.strip().upper() or "INFO",
            "trace_id": resolved,
            "message": mask_store_credentials(message),
            "app_version": get_app_version(),
            "pid": os.getpid(),
        }
        if data:
            record["data"] = to_event_data(dict(data))

        line = json.dumps(record, ensure_ascii=True, sort_keys=True) + "\n"
        with self._lock, self._events_path.open("a", encoding="utf-8") as handle:
            handle.write(line)
        return resolved

    def capture_exception(
        self,
        *,
        exc_type: type[BaseException],
        exc_value: BaseException,
        exc_traceback: Any,
        context: str,
    ) -> str:
        return self.emit_event(
            event_type="app.crash",
            level="ERROR",
            message=f"Unhandled exception in {context}: {exc_value}",
            data={
                "context": context,
                "exception_type": getattr(exc_type, "__name__", str(exc_type)),
                # DomainError codes (STALE_WRITE, STORE_UNAVAILABLE, ...) survive into the crash record.
                "code": getattr(exc_value, "code", None),
                "stacktrace": "".join(traceback.format_exception(exc_type, exc_value, exc_traceback)),
            },
        )

    def read_events(self, *, trace_id: str | None = None, event_type: str | None = None) -> list[dict[str, Any]]:
        return [
            event
            for event in self._iter_events()
            if (not trace_id or event.get("trace_id") == trace_id)
            and (not event_type or event.get("event_type") == event_type)
        ]

    def _iter_events(self) -> Iterator[dict[str, Any]]:
        if not self._events_path.exists():
            return
        with self._events_path.open(encoding="utf-8", errors="ignore") as handle:
            for line in handle:
                try:
                    event = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(event, dict):
                    yield event


_GLOBAL_SUPPORT: OperationalSupport | None = None
_HOOKS_INSTALLED = False


def get_operational_support() -> OperationalSupport:
    global _GLOBAL_SUPPORT
    if _GLOBAL_SUPPORT is None:
        _GLOBAL_SUPPORT = OperationalSupport()
    return _GLOBAL_SUPPORT


def install_global_exception_hooks(support: OperationalSupport | None = None) -> None:
    """Record uncaught exceptions from the main thread and from detection workers."""
    global _HOOKS_INSTALLED
    if _HOOKS_INSTALLED:
        return

    recorder = support or get_operational_support()
    previous_sys_hook = sys.excepthook
    previous_thread_hook = threading.excepthook

    def _record(exc_type, exc_value, exc_tb, context: str) -> None:
        try:
            recorder.capture_exception(
                exc_type=exc_type, exc_value=exc_value, exc_traceback=exc_tb, context=context
            )
        except OSError:
            logging.getLogger(__name__).warning("Could not record crash event for %s", context)

    def _sys_hook(exc_type, exc_value, exc_tb) -> None:
        _record(exc_type, exc_value, exc_tb, "main-thread")
        previous_sys_hook(exc_type, exc_value, exc_tb)

    def _thread_hook(args) -> None:
        _record(args.exc_type, args.exc_value, args.exc_traceback, f"thread:{getattr(args.thread, 'name', 'worker')}")
        previous_thread_hook(args)

    sys.excepthook = _sys_hook
    threading.excepthook = _thread_hook
    _HOOKS_INSTALLED = True


__all__ = [
    "MASK",
    "OperationalSupport",
    "TraceIdLogFilter",
    "bind_trace_id",
    "create_trace_id",
    "current_trace_id",
    "get_operational_support",
    "install_global_exception_hooks",
    "mask_store_credentials",
    "to_event_data",
]
