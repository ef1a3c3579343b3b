"""日程刷新（以最后完成的读取为准）测试。"""
from datetime import date, time

import pytest

from health_tracker.medication.lifecycle import AgendaResult, LoadState, ReminderLifecycleManager
from health_tracker.medication.models import DateWindow, ReminderDefinition
from health_tracker.medication.refresh import AgendaRefresher
from health_tracker.medication.store import ReminderStore

WINDOW = DateWindow(date(2024, 1, 1), date(2024, 1, 7))


class OneReminderStore(ReminderStore):
    def fetch_reminders(self, owner_id, active_only=True):
        return [ReminderDefinition(
            id="r1", owner_id=owner_id, medicine_name="A", dosage="1 片",
            times_of_day=[time(8, 0)], start_date=date(2024, 1, 1),
        )]

    def fetch_logs(self, owner_id, window):
        return []

    def create_reminder(self, definition):
        return "r1"

    def update_reminder(self, reminder_id, definition):
        return reminder_id

    def delete_reminder(self, reminder_id):
        pass

    def log_intake(self, log):
        return log


class BrokenStore(OneReminderStore):
    def fetch_reminders(self, owner_id, active_only=True):
        raise RuntimeError("boom")


def _result(state: LoadState) -> AgendaResult:
    return AgendaResult(state, WINDOW)


def test_newer_result_replaces_older() -> None:
    seen = []
    refresher = AgendaRefresher(on_update=seen.append)
    first = refresher.begin()
    second = refresher.begin()
    newer = _result(LoadState.FRESH)
    older = _result(LoadState.STALE)
    assert refresher.complete(second, newer) is True
    # 先发起的读取后返回，丢弃
    assert refresher.complete(first, older) is False
    assert refresher.current is newer
    assert seen == [newer]


def test_in_order_completion_applies_both() -> None:
    refresher = AgendaRefresher()
    first, second = refresher.begin(), refresher.begin()
    a, b = _result(LoadState.FRESH), _result(LoadState.UNAVAILABLE)
    assert refresher.complete(first, a)
    assert refresher.complete(second, b)
    assert refresher.current is b


def test_refresh_sync() -> None:
    manager = ReminderLifecycleManager(OneReminderStore(), today=lambda: date(2024, 1, 1))
    refresher = AgendaRefresher()
    result = refresher.refresh(manager, "u1")
    assert result is refresher.current
    assert result.state == LoadState.FRESH
    assert len(result.days) == 7


def test_worker_emits_ticket_and_result() -> None:
    pytest.importorskip("PyQt6.QtCore")
    from PyQt6.QtCore import QCoreApplication

    from health_tracker.medication.refresh_worker import RefreshWorker

    app = QCoreApplication.instance() or QCoreApplication([])
    assert app is not None
    manager = ReminderLifecycleManager(OneReminderStore(), today=lambda: date(2024, 1, 1))
    refresher = AgendaRefresher()
    worker = RefreshWorker(manager, "u1", refresher.begin(), WINDOW)
    worker.finished_result.connect(refresher.complete)
    worker.run()  # 在当前线程执行，信号直连
    assert refresher.current is not None
    assert refresher.current.state == LoadState.FRESH
    assert len(refresher.current.days) == 7


def test_worker_reports_unexpected_failure() -> None:
    pytest.importorskip("PyQt6.QtCore")
    from PyQt6.QtCore import QCoreApplication

    from health_tracker.medication.refresh_worker import RefreshWorker

    app = QCoreApplication.instance() or QCoreApplication([])
    assert app is not None
    manager = ReminderLifecycleManager(BrokenStore(), today=lambda: date(2024, 1, 1))
    refresher = AgendaRefresher()
    failures = []
    worker = RefreshWorker(manager, "u1", refresher.begin())
    worker.finished_result.connect(refresher.complete)
    worker.finished_fail.connect(failures.append)
    worker.run()
    assert failures == ["boom"]
    assert refresher.current.state == LoadState.UNAVAILABLE
    assert refresher.current.window == WINDOW
    assert refresher.current.is_empty is False
