"""提醒的新建、修改、删除与日程加载。

日程从不缓存：每次读取都拉取定义与服药记录后重新生成，所以修改提醒后
不需要单独「重新生成」，下一次读取自然反映最新定义。历史服药记录永远不删。
"""
import sys
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Callable, List, Optional, Tuple

from health_tracker.config import HISTORY_DAYS, LOOKAHEAD_DAYS
from health_tracker.medication import agenda, merge, occurrences
from health_tracker.medication.adherence import AdherenceSummary, summarize
from health_tracker.medication.cache import ReminderCache
from health_tracker.medication.errors import DataIntegrityError, TransientFetchError
from health_tracker.medication.models import (
    AgendaDay,
    DateWindow,
    IntakeLog,
    IntakeStatus,
    ReminderDefinition,
)
from health_tracker.medication.store import ReminderStore
from health_tracker.medication.validation import ensure_valid


def _log(msg: str) -> None:
    print(f"[用药提醒] {msg}", file=sys.stderr, flush=True)


class LoadState(str, Enum):
    """日程加载结果。UNAVAILABLE 与「没有提醒」是两回事。"""
    FRESH = "fresh"
    STALE = "stale"            # 网络失败，展示本地快照
    UNAVAILABLE = "unavailable"  # 网络失败且无快照，界面应提示重试


@dataclass
class AgendaResult:
    """一次「拉取-计算」的结果。"""
    state: LoadState
    window: DateWindow
    days: List[AgendaDay] = field(default_factory=list)
    integrity_errors: List[DataIntegrityError] = field(default_factory=list)
    error: Optional[TransientFetchError] = None
    fetched_at: Optional[datetime] = None

    @property
    def is_available(self) -> bool:
        return self.state != LoadState.UNAVAILABLE

    @property
    def is_empty(self) -> bool:
        """确实没有提醒（加载失败时为 False）。"""
        return self.is_available and not self.days


@dataclass
class HistoryResult:
    """历史视图：包含已删除提醒，以及不再对应任何实例的服药记录。"""
    window: DateWindow
    days: List[AgendaDay]
    orphaned_logs: List[IntakeLog]
    adherence: AdherenceSummary
    integrity_errors: List[DataIntegrityError] = field(default_factory=list)


def assemble(
    definitions: List[ReminderDefinition],
    logs: List[IntakeLog],
    window: DateWindow,
) -> Tuple[List[AgendaDay], List[DataIntegrityError]]:
    """生成 → 合并 → 分组排序。纯函数。"""
    occ, problems = occurrences.generate_all(definitions, window)
    items = merge.merge(occ, logs, definitions)
    return agenda.build(items), problems


class ReminderLifecycleManager:
    """提醒的生命周期：有效 ⇄ 已修改，有效 → 已删除（不可恢复）。"""

    def __init__(
        self,
        store: ReminderStore,
        cache: Optional[ReminderCache] = None,
        lookahead_days: int = LOOKAHEAD_DAYS,
        today: Optional[Callable[[], date]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.cache = cache
        self.lookahead_days = lookahead_days
        self._today = today or date.today
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def create(self, definition: ReminderDefinition) -> str:
        """校验后提交，返回远端分配的 ID。不合法时抛出 ValidationError，不会提交。"""
        ensure_valid(definition)
        reminder_id = self.store.create_reminder(definition.model_copy(update={"id": None}))
        _log(f"已创建提醒 {reminder_id}: {definition.medicine_name}")
        return reminder_id

    def update(self, reminder_id: str, definition: ReminderDefinition) -> str:
        """校验后整体替换定义。已有的服药记录保持不变。"""
        ensure_valid(definition)
        confirmed = self.store.update_reminder(reminder_id, definition.model_copy(update={"id": reminder_id}))
        _log(f"已修改提醒 {confirmed}")
        return confirmed

    def delete(self, reminder_id: str) -> None:
        """标记为无效；删除日之后不再生成，历史记录保留。"""
        self.store.delete_reminder(reminder_id)
        _log(f"已删除提醒 {reminder_id}")

    def log_taken(
        self,
        reminder_id: str,
        scheduled_date: date,
        scheduled_time: time,
        logged_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> IntakeLog:
        """记录一次已服用。即使当前定义已不再生成这个时刻也照常记录。"""
        log = IntakeLog(
            reminder_id=reminder_id,
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            status=IntakeStatus.TAKEN,
            logged_at=logged_at or self._clock(),
            notes=notes,
        )
        return self.store.log_intake(log)

    def upcoming_window(self) -> DateWindow:
        return DateWindow.upcoming(self._today(), self.lookahead_days)

    def load_agenda(self, owner_id: str, window: Optional[DateWindow] = None) -> AgendaResult:
        """拉取有效提醒与窗口内的服药记录并计算日程。

        拉取失败不会得到空日程：有本地快照则为 STALE，否则为 UNAVAILABLE。
        """
        window = window or self.upcoming_window()
        try:
            definitions = self.store.fetch_reminders(owner_id, active_only=True)
            logs = self.store.fetch_logs(owner_id, window)
        except TransientFetchError as e:
            _log(f"加载日程失败: {e}")
            snapshot = self.cache.load(owner_id) if self.cache is not None else None
            if snapshot is None:
                return AgendaResult(LoadState.UNAVAILABLE, window, error=e)
            days, problems = assemble(snapshot.definitions, snapshot.logs, window)
            return AgendaResult(
                LoadState.STALE,
                window,
                days=days,
                integrity_errors=problems,
                error=e,
                fetched_at=snapshot.fetched_at,
            )
        fetched_at = self._clock()
        if self.cache is not None:
            try:
                self.cache.save(owner_id, definitions, logs, fetched_at)
            except OSError as e:
                _log(f"写入本地快照失败: {e}")
        days, problems = assemble(definitions, logs, window)
        for p in problems:
            _log(str(p))
        return AgendaResult(LoadState.FRESH, window, days=days, integrity_errors=problems, fetched_at=fetched_at)

    def load_history(self, owner_id: str, window: Optional[DateWindow] = None) -> HistoryResult:
        """过去 HISTORY_DAYS 天（含今天）的日程、孤立记录与依从性。拉取失败直接抛出。"""
        today = self._today()
        window = window or DateWindow(today - timedelta(days=HISTORY_DAYS - 1), today)
        definitions = self.store.fetch_reminders(owner_id, active_only=False)
        logs = self.store.fetch_logs(owner_id, window)
        occ, problems = occurrences.generate_all(definitions, window)
        items = merge.merge(occ, logs, definitions)
        in_window = [log for log in logs if log.scheduled_date in window]
        now = self._clock().astimezone().replace(tzinfo=None)
        return HistoryResult(
            window=window,
            days=agenda.build(items),
            orphaned_logs=merge.orphaned_logs(occ, in_window),
            adherence=summarize(items, now),
            integrity_errors=problems,
        )
