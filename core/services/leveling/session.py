from __future__ import annotations

import logging

from core.domain import Task
from core.events.domain_events import domain_events
from core.services.leveling.models import LevelingAnalysis, Recommendation
from core.services.leveling.policy import LevelingStrategy
from core.services.leveling.service import LevelingService

logger = logging.getLogger(__name__)


class LevelingSession:
    """
    Caller-side leveling loop for one project (or all projects).

    Holds the latest analysis and its pending recommendations. A successful
    apply, or any task change reported through domain events, marks the
    analysis stale; the next read re-analyzes from the store. A failed apply
    leaves the pending list untouched and re-raises the store's error.
    """

    def __init__(
        self,
        service: LevelingService,
        project_id: str | None = None,
        strategy: LevelingStrategy | str = LevelingStrategy.BALANCED,
    ):
        self._service = service
        self._project_id = project_id
        self._strategy = LevelingStrategy.parse(strategy)
        self._analysis: LevelingAnalysis | None = None
        self._pending: list[Recommendation] = []
        self._stale = True
        domain_events.tasks_changed.connect(self._on_tasks_changed)
        domain_events.leveling_invalidated.connect(self._on_tasks_changed)

    @property
    def project_id(self) -> str | None:
        return self._project_id

    @property
    def strategy(self) -> LevelingStrategy:
        return self._strategy

    @strategy.setter
    def strategy(self, value: LevelingStrategy | str) -> None:
        parsed = LevelingStrategy.parse(value)
        if parsed != self._strategy:
            self._strategy = parsed
            self._stale = True

    @property
    def is_stale(self) -> bool:
        return self._stale

    @property
    def analysis(self) -> LevelingAnalysis:
        if self._stale or self._analysis is None:
            self.refresh()
        return self._analysis

    @property
    def pending(self) -> list[Recommendation]:
        if self._stale:
            self.refresh()
        return list(self._pending)

    def refresh(self) -> LevelingAnalysis:
        self._analysis = self._service.analyze(project_id=self._project_id, strategy=self._strategy)
        self._pending = list(self._analysis.recommendations)
        self._stale = False
        return self._analysis

    def apply(self, recommendation: Recommendation) -> Task:
        updated = self._service.apply(recommendation)
        # Every pending recommendation was computed from the pre-apply snapshot.
        self._pending = []
        self._stale = True
        return updated

    def close(self) -> None:
        domain_events.tasks_changed.disconnect(self._on_tasks_changed)
        domain_events.leveling_invalidated.disconnect(self._on_tasks_changed)

    def _on_tasks_changed(self, project_id: str) -> None:
        # Any project can hold a task that now conflicts across projects with ours.
        if not self._stale:
            logger.debug("Leveling analysis for %s invalidated by change in %s", self._project_id, project_id)
        self._stale = True


__all__ = ["LevelingSession"]
