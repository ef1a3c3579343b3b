"""「何时该吃什么」：交给外部通知模块去发系统提醒，这里不调度任何闹钟。"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from health_tracker.medication.agenda import flatten
from health_tracker.medication.models import AgendaDay


@dataclass(frozen=True)
class DueReminder:
    """一条待发送的提醒。"""
    reminder_id: str
    at: datetime
    medicine_name: str
    dosage: str

    @property
    def title(self) -> str:
        return "💊 服药提醒"

    @property
    def body(self) -> str:
        return f"该吃 {self.medicine_name} 了（{self.dosage}）"


def _local(now: datetime) -> datetime:
    # 日程时刻是本地墙钟时间（无时区）
    if now.tzinfo is not None:
        return now.astimezone().replace(tzinfo=None)
    return now


def due_reminders(days: Iterable[AgendaDay], now: datetime, lead_minutes: int = 0) -> List[DueReminder]:
    """返回计划时刻不晚于 now + lead_minutes 且尚未服用的提醒，按时间升序。"""
    now = _local(now)
    limit = now + timedelta(minutes=lead_minutes)
    out = []
    for item in flatten(days):
        if item.is_taken:
            continue
        at = item.occurrence.at
        if at <= limit:
            out.append(DueReminder(item.reminder_id, at, item.medicine_name, item.dosage))
    out.sort(key=lambda r: (r.at, r.medicine_name, r.reminder_id))
    return out


def next_due(days: Iterable[AgendaDay], now: datetime) -> Optional[DueReminder]:
    """now 之后最近的一条待服用提醒。"""
    now = _local(now)
    upcoming = [
        DueReminder(i.reminder_id, i.occurrence.at, i.medicine_name, i.dosage)
        for i in flatten(days)
        if not i.is_taken and i.occurrence.at > now
    ]
    if not upcoming:
        return None
    return min(upcoming, key=lambda r: (r.at, r.medicine_name, r.reminder_id))
