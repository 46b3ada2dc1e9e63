from __future__ import annotations

import time
from threading import Event

from core.exceptions import AnalysisCancelledError, ValidationError


class CancelToken:
    """
    Cooperative cancellation for an analysis pass. Optionally carries a
    deadline; once it passes the token reports itself cancelled.
    """

    def __init__(self, timeout_seconds: float | None = None) -> None:
        if timeout_seconds is not None and timeout_seconds <= 0:
            raise ValidationError(
                "timeout_seconds must be greater than zero.",
                code="LEVELING_INVALID_TIMEOUT",
            )
        self._event = Event()
        self._deadline = None if timeout_seconds is None else time.monotonic() + timeout_seconds

    def cancel(self) -> None:
        self._event.set()

    @property
    def timed_out(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def is_cancelled(self) -> bool:
        return self._event.is_set() or self.timed_out

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelledError("Leveling analysis was cancelled.", code="LEVELING_CANCELLED")
        if self.timed_out:
            raise AnalysisCancelledError("Leveling analysis exceeded its deadline.", code="LEVELING_TIMEOUT")


def check_cancelled(token: CancelToken | None) -> None:
    if token is not None:
        token.raise_if_cancelled()


__all__ = ["CancelToken", "check_cancelled"]
