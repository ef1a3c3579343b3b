"""健康记录客户端全局配置与路径。"""
import os
from pathlib import Path

# 项目根目录（health_tracker 包所在目录的上一级）
ROOT_DIR = Path(__file__).resolve().parent.parent
# 数据目录：本地缓存等
DATA_DIR = ROOT_DIR / "data"
CACHE_DIR = DATA_DIR / "cache"  # 远端数据的本地快照（离线时展示）

# 远端服务
API_BASE_URL = os.environ.get("HEALTH_API_BASE_URL", "http://localhost:5000/api").rstrip("/")
API_TOKEN = os.environ.get("HEALTH_API_TOKEN", "").strip()
REQUEST_TIMEOUT = 30  # 秒

# 用药提醒
LOOKAHEAD_DAYS = 7  # 「即将到来」视图，含今天
HISTORY_DAYS = 30  # 历史与依从性统计
CACHE_MAX_LOGS = 1000  # 本地只保留最近的服药记录


def ensure_dirs() -> None:
    """确保数据目录存在。"""
    for d in (DATA_DIR, CACHE_DIR):
        d.mkdir(parents=True, exist_ok=True)
