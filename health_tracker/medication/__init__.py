"""用药提醒：提醒定义、实例生成、服药状态合并与日程。"""
from health_tracker.medication.errors import (
    ConflictOnWrite,
    DataIntegrityError,
    TransientFetchError,
    ValidationError,
)
from health_tracker.medication.lifecycle import AgendaResult, LoadState, ReminderLifecycleManager
from health_tracker.medication.models import (
    AgendaDay,
    AgendaItem,
    DateWindow,
    Frequency,
    IntakeLog,
    IntakeStatus,
    Occurrence,
    ReminderDefinition,
    Weekday,
)
from health_tracker.medication.store import HttpReminderStore, ReminderStore

__all__ = [
    "AgendaDay",
    "AgendaItem",
    "AgendaResult",
    "ConflictOnWrite",
    "DataIntegrityError",
    "DateWindow",
    "Frequency",
    "HttpReminderStore",
    "IntakeLog",
    "IntakeStatus",
    "LoadState",
    "Occurrence",
    "ReminderDefinition",
    "ReminderLifecycleManager",
    "ReminderStore",
    "TransientFetchError",
    "ValidationError",
    "Weekday",
]
