"""把提醒实例与服药记录合并为日程条目。"""
from datetime import date, time
from typing import Dict, Iterable, List, Tuple

from health_tracker.medication.models import (
    AgendaItem,
    IntakeLog,
    IntakeStatus,
    Occurrence,
    ReminderDefinition,
)

Key = Tuple[str, date, time]


def index_logs(logs: Iterable[IntakeLog]) -> Dict[Key, IntakeLog]:
    """按 (reminder_id, 日期, 时刻) 建索引；同一键有多条时保留 logged_at 最新的一条。"""
    out: Dict[Key, IntakeLog] = {}
    for log in logs:
        prev = out.get(log.key)
        if prev is None or log.logged_at > prev.logged_at:
            out[log.key] = log
    return out


def merge(
    occurrences: Iterable[Occurrence],
    logs: Iterable[IntakeLog],
    definitions: Iterable[ReminderDefinition],
) -> List[AgendaItem]:
    """有匹配记录为 taken，否则为 pending。输出顺序与输入实例一致。"""
    by_key = index_logs(logs)
    by_id = {d.id: d for d in definitions if d.id is not None}
    items: List[AgendaItem] = []
    for occ in occurrences:
        definition = by_id.get(occ.reminder_id)
        if definition is None:
            continue
        log = by_key.get(occ.key)
        items.append(AgendaItem(
            occurrence=occ,
            medicine_name=definition.medicine_name,
            dosage=definition.dosage,
            status=IntakeStatus.TAKEN if log is not None else IntakeStatus.PENDING,
            logged_at=log.logged_at if log is not None else None,
        ))
    return items


def orphaned_logs(occurrences: Iterable[Occurrence], logs: Iterable[IntakeLog]) -> List[IntakeLog]:
    """没有任何实例对应的记录（提醒被修改或删除后留下的历史记录）。"""
    keys = {occ.key for occ in occurrences}
    return [log for log in logs if log.key not in keys]
