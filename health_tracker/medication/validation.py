"""提醒定义的约束检查（纯函数）。"""
from typing import List

from health_tracker.medication.errors import FieldError, ValidationError
from health_tracker.medication.models import Frequency, ReminderDefinition


def validate_definition(definition: ReminderDefinition) -> List[FieldError]:
    """返回全部违反的约束；为空表示合法。"""
    errors: List[FieldError] = []
    if not definition.owner_id.strip():
        errors.append(FieldError("owner_id", "缺少所属用户"))
    if not definition.medicine_name.strip():
        errors.append(FieldError("medicine_name", "请填写药品名"))
    if not definition.dosage.strip():
        errors.append(FieldError("dosage", "请填写剂量"))
    if not definition.times_of_day:
        errors.append(FieldError("times_of_day", "至少需要一个提醒时刻"))
    if definition.frequency == Frequency.WEEKLY and not definition.specific_days:
        errors.append(FieldError("specific_days", "每周提醒需要选择星期"))
    if definition.end_date is not None and definition.end_date < definition.start_date:
        errors.append(FieldError("end_date", "结束日期不能早于开始日期"))
    return errors


def is_valid(definition: ReminderDefinition) -> bool:
    return not validate_definition(definition)


def ensure_valid(definition: ReminderDefinition) -> ReminderDefinition:
    """合法则原样返回，否则抛出带全部字段的 ValidationError。"""
    errors = validate_definition(definition)
    if errors:
        raise ValidationError(errors)
    return definition
