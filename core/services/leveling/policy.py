from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from core.domain import DEFAULT_MAX_CONCURRENT_ASSIGNMENTS, TaskPriority
from core.exceptions import ValidationError


class LevelingStrategy(str, Enum):
    BALANCED = "balanced"
    MINIMIZE_DELAY = "minimize_delay"
    MAXIMIZE_EFFICIENCY = "maximize_efficiency"

    @classmethod
    def parse(cls, value: "LevelingStrategy | str | None") -> "LevelingStrategy":
        if isinstance(value, LevelingStrategy):
            return value
        if value is None or not str(value).strip():
            return cls.BALANCED
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unknown leveling strategy: {value!r}.",
                code="LEVELING_INVALID_STRATEGY",
            ) from None


class Severity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def lowered(self) -> "Severity":
        """One step less severe; LOW stays LOW."""
        return _SEVERITY_ORDER[min(self.rank + 1, len(_SEVERITY_ORDER) - 1)]


_SEVERITY_ORDER = (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW)
_SEVERITY_RANK = {severity: index for index, severity in enumerate(_SEVERITY_ORDER)}

_DEFAULT_PRIORITY_SCORES = {
    TaskPriority.CRITICAL: 3,
    TaskPriority.HIGH: 2,
}


@dataclass(frozen=True)
class LevelingPolicy:
    """
    Thresholds and knobs for conflict scoring.

    `from_env` overrides the overlap, buffer, split, capacity, worker and
    timeout values from PM_LEVELING_* env vars. Priority scores are set in
    code only.
    """

    high_overlap_days: int = 7
    medium_overlap_days: int = 3
    delay_buffer_days: int = 2
    split_min_duration_days: int = 5
    critical_flag_score: int = 4
    default_priority_score: int = 1
    priority_scores: Mapping[TaskPriority, int] = field(
        default_factory=lambda: dict(_DEFAULT_PRIORITY_SCORES)
    )
    default_max_concurrent: int = DEFAULT_MAX_CONCURRENT_ASSIGNMENTS
    max_workers: int = 4
    analysis_timeout_seconds: float | None = None

    def overlap_severity(self, overlap_days: int) -> Severity:
        if overlap_days > self.high_overlap_days:
            return Severity.HIGH
        if overlap_days > self.medium_overlap_days:
            return Severity.MEDIUM
        return Severity.LOW

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LevelingPolicy":
        env = os.environ if environ is None else environ
        defaults = cls()
        timeout = _env_float(env, "PM_LEVELING_ANALYSIS_TIMEOUT_SECONDS", None)
        return cls(
            high_overlap_days=_env_int(env, "PM_LEVELING_HIGH_OVERLAP_DAYS", defaults.high_overlap_days),
            medium_overlap_days=_env_int(env, "PM_LEVELING_MEDIUM_OVERLAP_DAYS", defaults.medium_overlap_days),
            delay_buffer_days=_env_int(env, "PM_LEVELING_DELAY_BUFFER_DAYS", defaults.delay_buffer_days),
            split_min_duration_days=_env_int(
                env, "PM_LEVELING_SPLIT_MIN_DURATION_DAYS", defaults.split_min_duration_days
            ),
            default_max_concurrent=_env_int(
                env, "PM_LEVELING_DEFAULT_MAX_CONCURRENT", defaults.default_max_concurrent
            ),
            max_workers=max(1, _env_int(env, "PM_LEVELING_MAX_WORKERS", defaults.max_workers)),
            analysis_timeout_seconds=timeout if timeout and timeout > 0 else None,
        )


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}.", code="LEVELING_INVALID_POLICY") from None


def _env_float(env: Mapping[str, str], name: str, default: float | None) -> float | None:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{name} must be a number, got {raw!r}.", code="LEVELING_INVALID_POLICY") from None


__all__ = ["LevelingPolicy", "LevelingStrategy", "Severity"]
