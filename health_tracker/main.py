"""入口：拉取并打印某用户未来几天的服药日程。

用法: python -m health_tracker.main <owner_id>（或设置 HEALTH_OWNER_ID）
"""
import os
import sys
from typing import List, Optional

from health_tracker import __version__
from health_tracker.config import ensure_dirs
from health_tracker.medication.agenda import format_agenda
from health_tracker.medication.cache import ReminderCache
from health_tracker.medication.lifecycle import LoadState, ReminderLifecycleManager
from health_tracker.medication.refresh import AgendaRefresher
from health_tracker.medication.store import HttpReminderStore


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    owner_id = args[0] if args else os.environ.get("HEALTH_OWNER_ID", "").strip()
    if not owner_id:
        print(f"health_tracker {__version__}\n用法: python -m health_tracker.main <owner_id>", file=sys.stderr)
        return 2

    ensure_dirs()
    manager = ReminderLifecycleManager(HttpReminderStore(), ReminderCache())
    result = AgendaRefresher().refresh(manager, owner_id)

    if result is None or result.state == LoadState.UNAVAILABLE:
        print("无法加载服药提醒，请检查网络后重试", file=sys.stderr)
        return 1
    if result.state == LoadState.STALE:
        print(f"（离线，显示 {result.fetched_at:%Y-%m-%d %H:%M} 的数据）")
    print(format_agenda(result.days))
    return 0


if __name__ == "__main__":
    sys.exit(main())
