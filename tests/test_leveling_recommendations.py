from __future__ import annotations

from datetime import date

import pytest

from core.domain import (
    Resource,
    ResourceStatus,
    ResourceType,
    Task,
    TaskPriority,
    TaskStatus,
    WorkPackage,
)
from core.exceptions import ValidationError
from core.services.leveling import (
    DelayRecommendation,
    LevelingPolicy,
    LevelingStrategy,
    ReallocateRecommendation,
    RecommendationKind,
    Severity,
    SplitRecommendation,
    build_recommendations,
    choose_delay_task,
    detect_conflicts,
    priority_score,
)


def _task(task_id, start, end, *, resources=("r1",), **extra):
    extra.setdefault("project_id", "p1")
    return Task(
        id=task_id,
        name=task_id.upper(),
        start_date=start,
        end_date=end,
        assigned_resources=frozenset(resources),
        **extra,
    )


def _recommend(tasks, resources, strategy="balanced", work_packages=(), policy=None):
    conflicts = detect_conflicts(resources, tasks)
    return build_recommendations(
        conflicts,
        strategy,
        tasks,
        resources,
        work_packages,
        policy=policy,
    )


def _delays(recommendations):
    return [rec for rec in recommendations if isinstance(rec, DelayRecommendation)]


def test_priority_score_prefers_critical_flag_over_priority():
    policy = LevelingPolicy()

    flagged = _task("a", None, None, priority=TaskPriority.LOW, is_critical=True)
    critical = _task("b", None, None, priority=TaskPriority.CRITICAL)
    high = _task("c", None, None, priority=TaskPriority.HIGH)
    medium = _task("d", None, None, priority=TaskPriority.MEDIUM)
    low = _task("e", None, None, priority=TaskPriority.LOW)

    assert [priority_score(t, policy) for t in (flagged, critical, high, medium, low)] == [4, 3, 2, 1, 1]


def test_end_to_end_pair_yields_expected_delay():
    a = _task("a", date(2024, 1, 1), date(2024, 1, 5), priority=TaskPriority.HIGH)
    b = _task("b", date(2024, 1, 3), date(2024, 1, 8), priority=TaskPriority.LOW)

    recs = _recommend([a, b], [Resource(id="r1", name="R")])

    assert len(recs) == 1
    delay = recs[0]
    assert isinstance(delay, DelayRecommendation)
    assert delay.kind == RecommendationKind.DELAY
    assert delay.task.id == "b"
    assert delay.delay_days == 4
    assert (delay.new_start, delay.new_end) == (date(2024, 1, 7), date(2024, 1, 12))
    assert delay.severity == Severity.LOW
    assert not delay.violates_deadline
    assert "balanced" in delay.rationale


def test_strategy_changes_which_task_is_delayed():
    a = _task("a", date(2024, 1, 1), date(2024, 1, 3), priority=TaskPriority.HIGH)
    b = _task("b", date(2024, 1, 2), date(2024, 1, 7), priority=TaskPriority.LOW)
    resources = [Resource(id="r1", name="R")]

    balanced = _delays(_recommend([a, b], resources, LevelingStrategy.BALANCED))
    shortest = _delays(_recommend([a, b], resources, LevelingStrategy.MINIMIZE_DELAY))

    assert balanced[0].task.id == "b"
    assert shortest[0].task.id == "a"
    # Shift "a" past the end of "b": (Jan 7 - Jan 1) + 2.
    assert shortest[0].delay_days == 8


def test_maximize_efficiency_delays_task_with_fewer_predecessors():
    a = _task("a", date(2024, 1, 1), date(2024, 1, 4), predecessor_ids=frozenset({"x", "y"}))
    b = _task("b", date(2024, 1, 2), date(2024, 1, 6), predecessor_ids=frozenset({"x", "y", "z"}))

    delay = _delays(_recommend([a, b], [Resource(id="r1", name="R")], "maximize_efficiency"))[0]

    assert delay.task.id == "a"


@pytest.mark.parametrize("strategy", list(LevelingStrategy))
def test_ties_delay_the_second_task(strategy):
    policy = LevelingPolicy()
    first = _task("a", date(2024, 1, 1), date(2024, 1, 4))
    second = _task("b", date(2024, 1, 2), date(2024, 1, 5))

    delay, keep = choose_delay_task(first, second, strategy, policy)

    assert (delay.id, keep.id) == ("b", "a")


def test_unknown_strategy_is_rejected():
    with pytest.raises(ValidationError) as exc:
        _recommend([], [], strategy="fastest")
    assert exc.value.code == "LEVELING_INVALID_STRATEGY"


def test_successors_are_counted_excluding_completed_ones():
    a = _task("a", date(2024, 1, 1), date(2024, 1, 5), priority=TaskPriority.HIGH)
    b = _task("b", date(2024, 1, 3), date(2024, 1, 8))
    waiting = _task("c", date(2024, 2, 1), date(2024, 2, 2), resources=(), predecessor_ids=frozenset({"b"}))
    blocked = _task(
        "d",
        date(2024, 2, 3),
        date(2024, 2, 4),
        resources=(),
        predecessor_ids=frozenset({"b"}),
        status=TaskStatus.BLOCKED,
    )
    done = _task(
        "e",
        date(2024, 2, 5),
        date(2024, 2, 6),
        resources=(),
        predecessor_ids=frozenset({"b"}),
        status=TaskStatus.COMPLETED,
    )

    delay = _delays(_recommend([a, b, waiting, blocked, done], [Resource(id="r1", name="R")]))[0]

    assert delay.task.id == "b"
    assert delay.impacted_successor_count == 2
    assert "2 downstream" in delay.rationale


def test_delay_past_work_package_delivery_is_critical():
    wp = WorkPackage(id="wp1", project_id="p1", name="Slab", target_delivery=date(2024, 1, 10))
    a = _task("a", date(2024, 1, 1), date(2024, 1, 5), priority=TaskPriority.HIGH)
    b = _task("b", date(2024, 1, 3), date(2024, 1, 8), work_package_id="wp1")

    delay = _delays(_recommend([a, b], [Resource(id="r1", name="R")], work_packages=[wp]))[0]

    assert delay.violates_deadline
    assert delay.severity == Severity.CRITICAL
    assert "2024-01-10" in delay.rationale


def test_delay_within_delivery_keeps_overlap_severity():
    wp = WorkPackage(id="wp1", project_id="p1", name="Slab", target_delivery=date(2024, 1, 12))
    a = _task("a", date(2024, 1, 1), date(2024, 1, 5), priority=TaskPriority.HIGH)
    b = _task("b", date(2024, 1, 3), date(2024, 1, 8), work_package_id="wp1")

    delay = _delays(_recommend([a, b], [Resource(id="r1", name="R")], work_packages=[wp]))[0]

    assert not delay.violates_deadline
    assert delay.severity == Severity.LOW


@pytest.mark.parametrize(
    ("end_day", "expected"),
    [(4, Severity.MEDIUM), (8, Severity.HIGH), (3, Severity.LOW)],
)
def test_overlap_length_sets_delay_severity(end_day, expected):
    # Overlap with a task on Jan 1..20 equals end_day days.
    a = _task("a", date(2024, 1, 1), date(2024, 1, 20), priority=TaskPriority.HIGH)
    b = _task("b", date(2024, 1, 1), date(2024, 1, end_day))

    delay = _delays(_recommend([a, b], [Resource(id="r1", name="R")]))[0]

    assert delay.severity == expected


def test_reallocation_picks_least_loaded_qualifying_resource():
    r1 = Resource(id="r1", name="Crew A", skills=frozenset({"rebar"}))
    busy = Resource(id="r2", name="Crew B", skills=frozenset({"rebar"}))
    light = Resource(id="r3", name="Crew C", skills=frozenset({"rebar", "formwork"}))
    loaded = Resource(id="r4", name="Crew D", skills=frozenset({"rebar"}))
    unskilled = Resource(id="r5", name="Crew E")
    off = Resource(id="r6", name="Crew F", skills=frozenset({"rebar"}), status=ResourceStatus.UNAVAILABLE)
    crane = Resource(id="r7", name="Crane", type=ResourceType.EQUIPMENT, skills=frozenset({"rebar"}))

    a = _task("a", date(2024, 1, 1), date(2024, 1, 5), priority=TaskPriority.HIGH)
    b = _task("b", date(2024, 1, 3), date(2024, 1, 8), required_skills=frozenset({"rebar"}))
    busy_task = _task("c", date(2024, 1, 6), date(2024, 1, 9), resources=("r2",))
    loaded_1 = _task("d", date(2024, 3, 1), date(2024, 3, 2), resources=("r4",))
    loaded_2 = _task("e", date(2024, 3, 3), date(2024, 3, 4), resources=("r4",))

    recs = _recommend(
        [a, b, busy_task, loaded_1, loaded_2],
        [r1, busy, light, loaded, unskilled, off, crane],
    )

    realloc = [rec for rec in recs if isinstance(rec, ReallocateRecommendation)]
    assert len(realloc) == 1
    assert realloc[0].task.id == "b"
    assert realloc[0].from_resource.id == "r1"
    assert realloc[0].to_resource.id == "r3"
    assert realloc[0].alternative_count == 2
    assert realloc[0].resource_id == "r1"


def test_reallocation_severity_is_one_step_below_delay():
    wp = WorkPackage(id="wp1", project_id="p1", name="Frame", target_delivery=date(2024, 1, 9))
    a = _task("a", date(2024, 1, 1), date(2024, 1, 5), priority=TaskPriority.HIGH)
    b = _task("b", date(2024, 1, 3), date(2024, 1, 8), work_package_id="wp1")
    resources = [Resource(id="r1", name="R1"), Resource(id="r2", name="R2")]

    recs = _recommend([a, b], resources, work_packages=[wp])

    kinds = {rec.kind: rec for rec in recs}
    assert kinds[RecommendationKind.DELAY].severity == Severity.CRITICAL
    assert kinds[RecommendationKind.REALLOCATE].severity == Severity.HIGH


def test_split_offered_only_for_long_tasks_with_an_alternative():
    a = _task("a", date(2024, 1, 1), date(2024, 1, 5), priority=TaskPriority.HIGH)
    long_b = _task("b", date(2024, 1, 3), date(2024, 1, 10))
    resources = [Resource(id="r1", name="R1"), Resource(id="r2", name="R2")]

    recs = _recommend([a, long_b], resources)
    splits = [rec for rec in recs if isinstance(rec, SplitRecommendation)]

    assert len(splits) == 1
    assert splits[0].task.id == "b"
    assert splits[0].primary_resource.id == "r1"
    assert splits[0].secondary_resource.id == "r2"
    assert splits[0].severity == Severity.LOW

    short_b = _task("b", date(2024, 1, 3), date(2024, 1, 7))
    assert not [rec for rec in _recommend([a, short_b], resources) if isinstance(rec, SplitRecommendation)]

    no_alternative = _recommend([a, long_b], resources[:1])
    assert [rec.kind for rec in no_alternative] == [RecommendationKind.DELAY]


def test_pair_sharing_two_resources_gets_one_recommendation_set():
    a = _task("a", date(2024, 1, 1), date(2024, 1, 5), resources=("r1", "r2"), priority=TaskPriority.HIGH)
    b = _task("b", date(2024, 1, 3), date(2024, 1, 8), resources=("r1", "r2"))

    recs = _recommend([a, b], [Resource(id="r1", name="R1"), Resource(id="r2", name="R2")])

    assert len(_delays(recs)) == 1


def test_recommendations_are_ordered_by_severity_and_inputs_untouched():
    wp = WorkPackage(id="wp1", project_id="p1", name="Roof", target_delivery=date(2024, 5, 3))
    tasks = [
        _task("a", date(2024, 1, 1), date(2024, 1, 5), priority=TaskPriority.HIGH),
        _task("b", date(2024, 1, 3), date(2024, 1, 8)),
        _task("c", date(2024, 3, 1), date(2024, 3, 20), resources=("r2",), priority=TaskPriority.HIGH),
        _task("d", date(2024, 3, 5), date(2024, 3, 18), resources=("r2",)),
        _task("e", date(2024, 5, 1), date(2024, 5, 4), resources=("r3",), priority=TaskPriority.CRITICAL),
        _task("f", date(2024, 5, 2), date(2024, 5, 3), resources=("r3",), work_package_id="wp1"),
    ]
    resources = [Resource(id=f"r{i}", name=f"R{i}") for i in (1, 2, 3, 4)]
    before = list(tasks)

    recs = _recommend(tasks, resources, work_packages=[wp])

    ranks = [rec.severity.rank for rec in recs]
    assert ranks == sorted(ranks)
    assert recs[0].severity == Severity.CRITICAL
    assert tasks == before


def test_policy_buffer_changes_delay_days():
    a = _task("a", date(2024, 1, 1), date(2024, 1, 5), priority=TaskPriority.HIGH)
    b = _task("b", date(2024, 1, 3), date(2024, 1, 8))

    delay = _delays(
        _recommend([a, b], [Resource(id="r1", name="R")], policy=LevelingPolicy(delay_buffer_days=1))
    )[0]

    assert delay.delay_days == 3
    assert delay.new_start == date(2024, 1, 6)
