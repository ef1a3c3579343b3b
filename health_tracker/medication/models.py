"""用药提醒数据模型：提醒定义、服药记录，以及派生的提醒实例与日程条目。"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Frequency(str, Enum):
    """重复频率。"""
    DAILY = "daily"
    WEEKLY = "weekly"


class Weekday(str, Enum):
    """星期，顺序与 date.weekday() 一致（周一为 0）。"""
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"
    SUN = "sun"

    @classmethod
    def of(cls, d: date) -> "Weekday":
        return _WEEKDAYS[d.weekday()]

    @property
    def number(self) -> int:
        return _WEEKDAYS.index(self)


_WEEKDAYS = list(Weekday)


class MealTiming(str, Enum):
    """服药与用餐的关系。"""
    BEFORE_MEAL = "before_meal"
    AFTER_MEAL = "after_meal"
    WITH_MEAL = "with_meal"
    ANYTIME = "anytime"


class IntakeStatus(str, Enum):
    """服药状态。PENDING 只会被推导出来，不会被存储。"""
    TAKEN = "taken"
    PENDING = "pending"


class ReminderDefinition(BaseModel):
    """用户编写的提醒定义。

    解析时只校验类型；跨字段约束由 validation.validate_definition 检查，
    这样远端存下的非法数据仍能被表示出来，再由生成器拒绝生成。
    """
    id: Optional[str] = Field(None, description="提醒 ID，由远端创建时分配")
    owner_id: str = Field(..., description="所属用户 ID")
    medicine_name: str = Field("", description="药品名")
    dosage: str = Field("", description="剂量，如 1 片 / 5ml")
    frequency: Frequency = Field(Frequency.DAILY, description="重复频率")
    specific_days: FrozenSet[Weekday] = Field(default_factory=frozenset, description="每周哪几天（仅 weekly）")
    times_of_day: Tuple[time, ...] = Field(default_factory=tuple, description="每天的提醒时刻，升序去重")
    start_date: date = Field(..., description="开始日期")
    end_date: Optional[date] = Field(None, description="结束日期（含）")
    notes: Optional[str] = Field(None, description="备注")
    meal_timing: MealTiming = Field(MealTiming.ANYTIME, description="与用餐的关系")
    active: bool = Field(True, description="是否有效；删除后为 False")
    deactivated_on: Optional[date] = Field(None, description="删除日期，此后不再生成")
    created_at: Optional[str] = Field(None, description="创建时间 ISO")
    updated_at: Optional[str] = Field(None, description="更新时间 ISO")

    model_config = ConfigDict(frozen=True)

    @field_validator("times_of_day", mode="after")
    @classmethod
    def _normalize_times(cls, value: Tuple[time, ...]) -> Tuple[time, ...]:
        # 只保留到分钟，去重并升序
        return tuple(sorted({t.replace(second=0, microsecond=0, tzinfo=None) for t in value}))

    @field_serializer("times_of_day")
    def _dump_times(self, value: Tuple[time, ...]) -> list:
        return [t.strftime("%H:%M") for t in value]

    @field_serializer("specific_days")
    def _dump_days(self, value: FrozenSet[Weekday]) -> list:
        return [d.value for d in sorted(value, key=lambda d: d.number)]

    def to_payload(self) -> dict:
        """提交给远端的 JSON 字段（不含服务端维护的字段）。"""
        return self.model_dump(
            mode="json",
            exclude={"id", "active", "deactivated_on", "created_at", "updated_at"},
        )


class IntakeLog(BaseModel):
    """一次「已服用」记录。没有记录即为待服用。"""
    id: Optional[str] = Field(None, description="记录 ID")
    reminder_id: str = Field(..., description="提醒 ID")
    scheduled_date: date = Field(..., description="计划日期")
    scheduled_time: time = Field(..., description="计划时刻")
    status: IntakeStatus = Field(IntakeStatus.TAKEN, description="只会是 taken")
    logged_at: datetime = Field(..., description="记录时间")
    notes: Optional[str] = Field(None, description="备注")

    model_config = ConfigDict(frozen=True)

    @field_validator("scheduled_time", mode="after")
    @classmethod
    def _trim_time(cls, value: time) -> time:
        return value.replace(second=0, microsecond=0, tzinfo=None)

    @field_validator("logged_at", mode="after")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        # 服务端未带时区的时间按 UTC 处理
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("status")
    @classmethod
    def _only_taken(cls, value: IntakeStatus) -> IntakeStatus:
        if value != IntakeStatus.TAKEN:
            raise ValueError("pending 不是可存储的状态")
        return value

    @field_serializer("scheduled_time")
    def _dump_time(self, value: time) -> str:
        return value.strftime("%H:%M")

    @property
    def key(self) -> Tuple[str, date, time]:
        return (self.reminder_id, self.scheduled_date, self.scheduled_time)


@dataclass(frozen=True)
class DateWindow:
    """闭区间日期窗口。"""
    start: date
    end: date

    @classmethod
    def upcoming(cls, today: date, days: int) -> "DateWindow":
        """从今天起共 days 天（含今天）。"""
        return cls(today, today + timedelta(days=max(days, 1) - 1))

    @property
    def is_empty(self) -> bool:
        return self.start > self.end

    def __contains__(self, d: date) -> bool:
        return self.start <= d <= self.end


@dataclass(frozen=True)
class Occurrence:
    """某条提醒在某天某时刻的一次实例（推导得出，不存储）。"""
    reminder_id: str
    date: date
    time: time

    @property
    def key(self) -> Tuple[str, date, time]:
        return (self.reminder_id, self.date, self.time)

    @property
    def at(self) -> datetime:
        return datetime.combine(self.date, self.time)


@dataclass(frozen=True)
class AgendaItem:
    """日程条目：实例 + 药品信息 + 服药状态。"""
    occurrence: Occurrence
    medicine_name: str
    dosage: str
    status: IntakeStatus
    logged_at: Optional[datetime] = None

    @property
    def reminder_id(self) -> str:
        return self.occurrence.reminder_id

    @property
    def date(self) -> date:
        return self.occurrence.date

    @property
    def time(self) -> time:
        return self.occurrence.time

    @property
    def is_taken(self) -> bool:
        return self.status == IntakeStatus.TAKEN


@dataclass(frozen=True)
class AgendaDay:
    """按日期分组后的一天。"""
    date: date
    items: Tuple[AgendaItem, ...]
