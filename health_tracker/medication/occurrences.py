"""提醒实例生成：把提醒定义展开为窗口内具体的日期与时刻。

纯函数，无 I/O；同样的输入永远得到同样顺序的输出。
"""
from datetime import date, timedelta
from typing import Iterable, Iterator, List, Optional, Tuple

from health_tracker.medication.errors import DataIntegrityError, FieldError
from health_tracker.medication.models import (
    DateWindow,
    Frequency,
    Occurrence,
    ReminderDefinition,
    Weekday,
)
from health_tracker.medication.validation import validate_definition


def clip_window(definition: ReminderDefinition, window: DateWindow) -> DateWindow:
    """把查询窗口裁剪到提醒自身的有效期内（可能得到空窗口）。"""
    start = max(window.start, definition.start_date)
    end = window.end
    if definition.end_date is not None:
        end = min(end, definition.end_date)
    # 删除当天仍有效，之后不再生成
    if definition.deactivated_on is not None:
        end = min(end, definition.deactivated_on)
    return DateWindow(start, end)


def _dates(window: DateWindow) -> Iterator[date]:
    d = window.start
    while d <= window.end:
        yield d
        d += timedelta(days=1)


def _keeps(definition: ReminderDefinition, d: date) -> bool:
    if definition.frequency == Frequency.DAILY:
        return True
    return Weekday.of(d) in definition.specific_days


def check_integrity(definition: ReminderDefinition) -> Optional[DataIntegrityError]:
    """已存储的定义若违反约束则返回错误（不抛出）。"""
    problems = validate_definition(definition)
    if definition.id is None:
        problems.append(FieldError("id", "已存储的提醒缺少 ID"))
    if problems:
        return DataIntegrityError(definition.id, problems)
    return None


def generate(definition: ReminderDefinition, window: DateWindow) -> List[Occurrence]:
    """生成窗口内的全部实例，按日期、时刻升序。非法定义返回空列表。"""
    if check_integrity(definition) is not None:
        return []
    clipped = clip_window(definition, window)
    if clipped.is_empty:
        return []
    out: List[Occurrence] = []
    for d in _dates(clipped):
        if not _keeps(definition, d):
            continue
        for t in definition.times_of_day:
            out.append(Occurrence(reminder_id=definition.id, date=d, time=t))
    return out


def generate_all(
    definitions: Iterable[ReminderDefinition],
    window: DateWindow,
) -> Tuple[List[Occurrence], List[DataIntegrityError]]:
    """对多条定义生成实例。返回 (实例, 数据完整性错误)；出错的定义不生成任何实例。"""
    occurrences: List[Occurrence] = []
    problems: List[DataIntegrityError] = []
    for definition in definitions:
        err = check_integrity(definition)
        if err is not None:
            problems.append(err)
            continue
        occurrences.extend(generate(definition, window))
    return occurrences, problems
