"""日程刷新后台 Worker（QThread），在后台线程拉取并计算日程，完成后交给 AgendaRefresher。"""
import sys
from typing import Optional

from PyQt6.QtCore import QThread, pyqtSignal

from health_tracker.medication.errors import TransientFetchError
from health_tracker.medication.lifecycle import AgendaResult, LoadState, ReminderLifecycleManager
from health_tracker.medication.models import DateWindow
from health_tracker.medication.refresh import AgendaRefresher


class RefreshWorker(QThread):
    """执行一次 load_agenda。"""
    finished_result = pyqtSignal(int, object)  # (编号, AgendaResult)
    finished_fail = pyqtSignal(str)

    def __init__(
        self,
        manager: ReminderLifecycleManager,
        owner_id: str,
        ticket: int,
        window: Optional[DateWindow] = None,
    ):
        super().__init__()
        self._manager = manager
        self._owner_id = owner_id
        self._ticket = ticket
        self._window = window

    def run(self) -> None:
        try:
            result = self._manager.load_agenda(self._owner_id, self._window)
        except Exception as e:
            print(f"[用药提醒-刷新] 后台加载异常: {e}", file=sys.stderr, flush=True)
            self.finished_fail.emit(str(e))
            window = self._window or self._manager.upcoming_window()
            error = TransientFetchError(f"加载异常: {e}")
            result = AgendaResult(LoadState.UNAVAILABLE, window, error=error)
        self.finished_result.emit(self._ticket, result)


def start_refresh(
    refresher: AgendaRefresher,
    manager: ReminderLifecycleManager,
    owner_id: str,
    window: Optional[DateWindow] = None,
) -> RefreshWorker:
    """页面激活时调用：领编号、启动 Worker，结果回到 refresher。调用方需持有返回的 Worker。"""
    worker = RefreshWorker(manager, owner_id, refresher.begin(), window)
    worker.finished_result.connect(refresher.complete)
    worker.start()
    return worker
