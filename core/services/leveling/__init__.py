from .analysis import analyze
from .applier import ResolutionApplier
from .cancellation import CancelToken
from .detection import detect_conflicts, overlap_days
from .load import summarize_resource_load
from .models import (
    ConflictType,
    DelayRecommendation,
    LevelingAnalysis,
    LoadStatus,
    ReallocateRecommendation,
    Recommendation,
    RecommendationKind,
    ResourceConflict,
    ResourceLoad,
    SplitRecommendation,
)
from .policy import LevelingPolicy, LevelingStrategy, Severity
from .recommender import build_recommendations
from .scoring import choose_delay_task, priority_score
from .service import LevelingService
from .session import LevelingSession

__all__ = [
    "analyze",
    "build_recommendations",
    "choose_delay_task",
    "detect_conflicts",
    "overlap_days",
    "priority_score",
    "summarize_resource_load",
    "CancelToken",
    "ConflictType",
    "DelayRecommendation",
    "LevelingAnalysis",
    "LevelingPolicy",
    "LevelingService",
    "LevelingSession",
    "LevelingStrategy",
    "LoadStatus",
    "ReallocateRecommendation",
    "Recommendation",
    "RecommendationKind",
    "ResolutionApplier",
    "ResourceConflict",
    "ResourceLoad",
    "Severity",
    "SplitRecommendation",
]
