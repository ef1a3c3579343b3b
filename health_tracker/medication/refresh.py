"""日程刷新：以最后完成的读取为准。

每次进入日程页面都会发起一次「拉取-计算」。用户改完提醒马上返回时，
两次读取可能交错完成；每次读取领一个递增的编号，只有比当前展示的更新的
结果才会整体替换日程，较早发起却较晚返回的结果直接丢弃。
"""
import itertools
import sys
from typing import Callable, Optional

from health_tracker.medication.lifecycle import AgendaResult, ReminderLifecycleManager
from health_tracker.medication.models import DateWindow


class AgendaRefresher:
    """持有当前展示的日程。"""

    def __init__(self, on_update: Optional[Callable[[AgendaResult], None]] = None):
        self._tickets = itertools.count(1)
        self._applied = 0
        self._on_update = on_update
        self.current: Optional[AgendaResult] = None

    def begin(self) -> int:
        """发起一次读取，返回编号。"""
        return next(self._tickets)

    def complete(self, ticket: int, result: AgendaResult) -> bool:
        """读取完成。被更新结果取代的返回 False 且不生效。"""
        if ticket <= self._applied:
            print(f"[用药提醒-刷新] 丢弃过期结果 #{ticket}（当前 #{self._applied}）", file=sys.stderr, flush=True)
            return False
        self._applied = ticket
        self.current = result
        if self._on_update is not None:
            self._on_update(result)
        return True

    def refresh(
        self,
        manager: ReminderLifecycleManager,
        owner_id: str,
        window: Optional[DateWindow] = None,
    ) -> Optional[AgendaResult]:
        """同步刷新（非界面场景），返回当前展示的日程。"""
        ticket = self.begin()
        self.complete(ticket, manager.load_agenda(owner_id, window))
        return self.current
