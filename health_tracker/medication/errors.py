"""用药提醒的错误类型。"""
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class FieldError:
    """单个字段的校验问题。"""
    field: str
    message: str


class ReminderError(Exception):
    """用药提醒相关错误的基类。"""


class ValidationError(ReminderError):
    """提醒定义不满足约束。errors 列出全部出问题的字段，而不只是第一个。"""

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in self.errors) or "校验失败")

    @property
    def fields(self) -> List[str]:
        out: List[str] = []
        for e in self.errors:
            if e.field not in out:
                out.append(e.field)
        return out


class DataIntegrityError(ReminderError):
    """已存储的提醒定义违反约束。生成器不会抛出它，只会返回它并且不生成任何实例。"""

    def __init__(self, reminder_id: Optional[str], problems: List[FieldError]):
        self.reminder_id = reminder_id
        self.problems = list(problems)
        detail = ", ".join(p.field for p in self.problems)
        super().__init__(f"提醒 {reminder_id} 数据不完整: {detail}")


class TransientFetchError(ReminderError):
    """网络或远端故障导致读写失败。表示「无法加载」，不等于「没有提醒」。"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ConflictOnWrite(ReminderError):
    """远端拒绝写入（版本冲突、无权限、不存在等）。原样上抛，不自动重试。"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
