from __future__ import annotations

import logging
import weakref
from threading import RLock
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Signal(Generic[T]):
    """
    Minimal signal/slot primitive used for domain events.
    Bound methods are held weakly so a dropped subscriber never keeps its
    owner alive; dead references are pruned on the next emit.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._subscribers: list[Callable[[], Callable[[T], None] | None]] = []
        self._lock: RLock = RLock()

    @staticmethod
    def _ref(callback: Callable[[T], None]) -> Callable[[], Callable[[T], None] | None]:
        if hasattr(callback, "__self__") and hasattr(callback, "__func__"):
            return weakref.WeakMethod(callback)
        return lambda: callback

    def _index_of(self, callback: Callable[[T], None]) -> int:
        for index, ref in enumerate(self._subscribers):
            if ref() == callback:
                return index
        return -1

    def connect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            if self._index_of(callback) < 0:
                self._subscribers.append(self._ref(callback))

    def disconnect(self, callback: Callable[[T], None]) -> None:
        with self._lock:
            index = self._index_of(callback)
            if index >= 0:
                del self._subscribers[index]

    def subscriber_count(self) -> int:
        with self._lock:
            return sum(1 for ref in self._subscribers if ref() is not None)

    def emit(self, payload: T) -> None:
        with self._lock:
            refs = list(self._subscribers)
        dead: list[Callable[[], Callable[[T], None] | None]] = []
        for ref in refs:
            callback = ref()
            if callback is None:
                dead.append(ref)
                continue
            callback(payload)
        if dead:
            with self._lock:
                self._subscribers = [ref for ref in self._subscribers if ref not in dead]
            logger.debug("Pruned %s dead subscriber(s) from signal %s", len(dead), self.name or "-")


__all__ = ["Signal"]
