"""日程整理：按日期分组，组内按时刻、药品名排序。

不依赖上游顺序，自己保证输出稳定。
"""
from itertools import groupby
from typing import Iterable, List

from health_tracker.medication.models import AgendaDay, AgendaItem

_WEEKDAY_NAMES = ("周一", "周二", "周三", "周四", "周五", "周六", "周日")


def _sort_key(item: AgendaItem):
    return (item.date, item.time, item.medicine_name, item.reminder_id)


def build(items: Iterable[AgendaItem]) -> List[AgendaDay]:
    """返回按日期升序的 AgendaDay 列表。"""
    ordered = sorted(items, key=_sort_key)
    return [
        AgendaDay(date=d, items=tuple(group))
        for d, group in groupby(ordered, key=lambda i: i.date)
    ]


def flatten(days: Iterable[AgendaDay]) -> List[AgendaItem]:
    return [item for day in days for item in day.items]


def format_agenda(days: List[AgendaDay]) -> str:
    """纯文本日程，供命令行展示。"""
    if not days:
        return "没有即将到来的服药提醒"
    lines = []
    for day in days:
        lines.append(f"{day.date.isoformat()} {_WEEKDAY_NAMES[day.date.weekday()]}")
        for item in day.items:
            mark = "已服用" if item.is_taken else "待服用"
            lines.append(f"  {item.time.strftime('%H:%M')}  {item.medicine_name} ({item.dosage})  [{mark}]")
    return "\n".join(lines)
