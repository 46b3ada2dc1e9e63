from __future__ import annotations

import logging
import time

from sqlalchemy.orm import Session

from core.domain import Task
from core.exceptions import AnalysisCancelledError
from core.services.common.base import ServiceBase, SupportEventSink
from core.services.leveling.analysis import analyze
from core.services.leveling.applier import ResolutionApplier
from core.services.leveling.cancellation import CancelToken
from core.services.leveling.models import LevelingAnalysis, Recommendation
from core.services.leveling.policy import LevelingPolicy, LevelingStrategy
from core.services.snapshot.models import ScheduleSnapshot
from core.services.snapshot.reader import ScheduleSnapshotReader

logger = logging.getLogger(__name__)


class LevelingService(ServiceBase):
    """
    Entry point for resource leveling:
    - analyze(): read a fresh snapshot, detect conflicts, build recommendations
    - apply(): write one chosen recommendation back to the task store
    Analysis never writes; every call re-reads the store.
    """

    def __init__(
        self,
        session: Session,
        snapshot_reader: ScheduleSnapshotReader,
        applier: ResolutionApplier,
        policy: LevelingPolicy | None = None,
        support: SupportEventSink | None = None,
    ):
        super().__init__(session, support)
        self._snapshot_reader: ScheduleSnapshotReader = snapshot_reader
        self._applier: ResolutionApplier = applier
        self._policy: LevelingPolicy = policy or LevelingPolicy()

    @property
    def policy(self) -> LevelingPolicy:
        return self._policy

    def read_snapshot(self, project_id: str | None = None) -> ScheduleSnapshot:
        return self._snapshot_reader.read(project_id)

    def analyze(
        self,
        project_id: str | None = None,
        strategy: LevelingStrategy | str = LevelingStrategy.BALANCED,
        resource_id: str | None = None,
        timeout_seconds: float | None = None,
        cancel_token: CancelToken | None = None,
    ) -> LevelingAnalysis:
        strategy = LevelingStrategy.parse(strategy)
        if cancel_token is None:
            timeout = timeout_seconds if timeout_seconds is not None else self._policy.analysis_timeout_seconds
            cancel_token = CancelToken(timeout_seconds=timeout)

        with self.trace_scope() as trace_id:
            started = time.perf_counter()
            snapshot = self._snapshot_reader.read(project_id)
            try:
                result = self.analyze_snapshot(
                    snapshot,
                    strategy,
                    resource_id=resource_id,
                    cancel_token=cancel_token,
                    trace_id=trace_id,
                )
            except AnalysisCancelledError as exc:
                logger.warning("Leveling analysis for %s stopped: %s", project_id or "all projects", exc)
                self.record_event(
                    "leveling.analysis.cancelled",
                    str(exc),
                    level="WARNING",
                    data={"project_id": project_id, "code": exc.code},
                )
                raise

            elapsed_ms = (time.perf_counter() - started) * 1000.0
            logger.info(
                "Leveling analysis for %s (%s): %s conflict(s), %s recommendation(s) in %.1f ms",
                project_id or "all projects",
                strategy.value,
                len(result.conflicts),
                len(result.recommendations),
                elapsed_ms,
            )
            self.record_event(
                "leveling.analysis.completed",
                f"{len(result.conflicts)} conflict(s) found",
                data={
                    "project_id": project_id,
                    "strategy": strategy.value,
                    "conflicts": len(result.conflicts),
                    "recommendations": len(result.recommendations),
                    "elapsed_ms": round(elapsed_ms, 1),
                },
            )
            return result

    def analyze_snapshot(
        self,
        snapshot: ScheduleSnapshot,
        strategy: LevelingStrategy | str = LevelingStrategy.BALANCED,
        resource_id: str | None = None,
        cancel_token: CancelToken | None = None,
        trace_id: str | None = None,
    ) -> LevelingAnalysis:
        return analyze(
            snapshot,
            strategy,
            policy=self._policy,
            resource_id=resource_id,
            cancel_token=cancel_token,
            trace_id=trace_id,
        )

    def apply(self, recommendation: Recommendation, expected_version: int | None = None) -> Task:
        with self.trace_scope():
            return self._applier.apply(recommendation, expected_version=expected_version)


__all__ = ["LevelingService"]
