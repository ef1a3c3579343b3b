"""远端数据的本地快照（JSON 文件）。

只缓存提醒定义与服药记录，日程本身每次都重新计算。
网络不可用时用快照展示「可能过期」的日程。
"""
import json
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional

from health_tracker.config import CACHE_DIR, CACHE_MAX_LOGS, ensure_dirs
from health_tracker.medication.models import IntakeLog, ReminderDefinition


@dataclass
class CachedSnapshot:
    """上一次成功拉取的数据。"""
    definitions: List[ReminderDefinition]
    logs: List[IntakeLog]
    fetched_at: datetime


class ReminderCache:
    """按用户保存快照：cache_dir/reminders_{owner_id}.json。"""

    def __init__(self, base_dir: Optional[Path] = None, max_logs: int = CACHE_MAX_LOGS):
        self.base_dir = base_dir or CACHE_DIR
        self.max_logs = max_logs
        ensure_dirs()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, owner_id: str) -> Path:
        return self.base_dir / f"reminders_{owner_id}.json"

    def save(
        self,
        owner_id: str,
        definitions: Iterable[ReminderDefinition],
        logs: Iterable[IntakeLog],
        fetched_at: Optional[datetime] = None,
    ) -> None:
        """覆盖保存快照。服药记录只保留 logged_at 最新的 max_logs 条。"""
        fetched_at = fetched_at or datetime.now(timezone.utc)
        kept = sorted(logs, key=lambda log: log.logged_at)[-self.max_logs:]
        data = {
            "fetched_at": fetched_at.isoformat(),
            "reminders": [d.model_dump(mode="json") for d in definitions],
            "logs": [log.model_dump(mode="json") for log in kept],
        }
        with open(self._path(owner_id), "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def load(self, owner_id: str) -> Optional[CachedSnapshot]:
        """读取快照；不存在或已损坏时返回 None。"""
        path = self._path(owner_id)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("快照不是 JSON 对象")
            return CachedSnapshot(
                definitions=[ReminderDefinition.model_validate(d) for d in data.get("reminders", [])],
                logs=[IntakeLog.model_validate(log) for log in data.get("logs", [])],
                fetched_at=datetime.fromisoformat(data["fetched_at"]),
            )
        except (OSError, ValueError, KeyError) as e:
            print(f"[用药提醒-缓存] 快照损坏，忽略: {path} ({e})", file=sys.stderr, flush=True)
            return None

    def clear(self, owner_id: str) -> bool:
        """删除快照（如退出登录）。"""
        path = self._path(owner_id)
        if not path.exists():
            return False
        path.unlink()
        return True
