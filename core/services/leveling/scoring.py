from __future__ import annotations

from core.domain import Task
from core.services.leveling.policy import LevelingPolicy, LevelingStrategy


def priority_score(task: Task, policy: LevelingPolicy) -> int:
    if task.is_critical:
        return policy.critical_flag_score
    return policy.priority_scores.get(task.priority, policy.default_priority_score)


def choose_delay_task(
    task1: Task,
    task2: Task,
    strategy: LevelingStrategy,
    policy: LevelingPolicy,
) -> tuple[Task, Task]:
    """Return (delay_task, keep_task). Every strategy delays task2 on a tie."""
    if strategy == LevelingStrategy.MINIMIZE_DELAY:
        first, second = task1.effective_duration_days, task2.effective_duration_days
    elif strategy == LevelingStrategy.MAXIMIZE_EFFICIENCY:
        first, second = len(task1.predecessor_ids), len(task2.predecessor_ids)
    else:
        first, second = priority_score(task1, policy), priority_score(task2, policy)

    if first < second:
        return task1, task2
    return task2, task1


__all__ = ["priority_score", "choose_delay_task"]
