from .models import ScheduleSnapshot
from .reader import ScheduleSnapshotReader

__all__ = ["ScheduleSnapshot", "ScheduleSnapshotReader"]
