from .leveling import LevelingService, LevelingSession, ResolutionApplier
from .snapshot import ScheduleSnapshotReader

__all__ = [
    "LevelingService",
    "LevelingSession",
    "ResolutionApplier",
    "ScheduleSnapshotReader",
]
