from __future__ import annotations

from datetime import date

import pytest

from core.events.domain_events import domain_events
from core.exceptions import ConcurrencyError
from core.services.leveling import (
    DelayRecommendation,
    LevelingSession,
    LevelingStrategy,
)


@pytest.fixture
def leveling_session(services, build):
    project = build.project("Session Site")
    crew = build.resource("Crew A")
    build.resource("Crew B")
    build.task(project, "Keep", date(2024, 1, 1), date(2024, 1, 5), [crew], is_critical=True)
    build.task(project, "Move", date(2024, 1, 3), date(2024, 1, 8), [crew])

    lev = LevelingSession(services["leveling_service"], project_id=project.id)
    try:
        yield lev
    finally:
        lev.close()


def test_session_analyzes_lazily(leveling_session):
    assert leveling_session.is_stale

    pending = leveling_session.pending

    assert not leveling_session.is_stale
    assert [rec.kind.value for rec in pending] == ["delay", "reallocate", "split"]
    assert leveling_session.analysis.strategy == LevelingStrategy.BALANCED


def test_successful_apply_discards_pending_and_reanalyzes(leveling_session):
    delay = next(r for r in leveling_session.pending if isinstance(r, DelayRecommendation))

    leveling_session.apply(delay)

    assert leveling_session.is_stale
    assert leveling_session.pending == []
    assert leveling_session.analysis.conflicts == ()


def test_failed_apply_keeps_pending_recommendations(services, leveling_session):
    pending = leveling_session.pending
    delay = next(r for r in pending if isinstance(r, DelayRecommendation))

    # Another writer moves the task without going through the leveling session.
    task = services["task_repo"].get(delay.task.id)
    services["task_repo"].update_schedule(task.id, task.version, date(2024, 2, 1), date(2024, 2, 6))
    services["session"].commit()

    with pytest.raises(ConcurrencyError):
        leveling_session.apply(delay)

    assert not leveling_session.is_stale
    assert leveling_session.pending == pending


def test_external_task_change_marks_session_stale(leveling_session):
    leveling_session.refresh()
    assert not leveling_session.is_stale

    domain_events.tasks_changed.emit("another-project")

    assert leveling_session.is_stale


def test_strategy_change_marks_session_stale(leveling_session):
    leveling_session.refresh()

    leveling_session.strategy = "minimize_delay"

    assert leveling_session.is_stale
    assert leveling_session.analysis.strategy == LevelingStrategy.MINIMIZE_DELAY


def test_closed_session_stops_listening(services):
    lev = LevelingSession(services["leveling_service"])
    lev.refresh()
    lev.close()

    domain_events.tasks_changed.emit("p")

    assert not lev.is_stale
