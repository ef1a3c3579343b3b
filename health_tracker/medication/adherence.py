"""服药依从性统计：已到时刻的提醒里，实际服用了多少。"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List

from health_tracker.medication.models import AgendaItem


@dataclass
class AdherenceSummary:
    """依从性汇总。rate 为四舍五入后的百分比，没有应服记录时为 0。"""
    scheduled: int = 0
    taken: int = 0
    missed: int = 0
    per_medicine: Dict[str, "AdherenceSummary"] = field(default_factory=dict)

    @property
    def rate(self) -> int:
        if self.scheduled == 0:
            return 0
        return int(self.taken * 100 / self.scheduled + 0.5)


def summarize(items: Iterable[AgendaItem], now: datetime) -> AdherenceSummary:
    """只统计计划时刻不晚于 now 的条目；未来的 pending 不算漏服。"""
    total = AdherenceSummary()
    for item in items:
        if item.occurrence.at > now:
            continue
        sub = total.per_medicine.setdefault(item.medicine_name, AdherenceSummary())
        for s in (total, sub):
            s.scheduled += 1
            if item.is_taken:
                s.taken += 1
            else:
                s.missed += 1
    return total


def missed_items(items: Iterable[AgendaItem], now: datetime) -> List[AgendaItem]:
    """已过时刻但没有服用记录的条目。"""
    return [i for i in items if not i.is_taken and i.occurrence.at <= now]
