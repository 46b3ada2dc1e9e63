"""Change notifications shared by the leveling core and its callers."""
from core.events.signal import Signal


class DomainEvents:
    def __init__(self) -> None:
        self.tasks_changed: Signal[str] = Signal("tasks_changed")                # project_id
        self.leveling_invalidated: Signal[str] = Signal("leveling_invalidated")  # project_id


# SINGLE global instance
domain_events = DomainEvents()
