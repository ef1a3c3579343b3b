"""提醒定义与服药记录模型测试。"""
from datetime import date, datetime, time, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from health_tracker.medication.errors import ValidationError
from health_tracker.medication.models import (
    DateWindow,
    Frequency,
    IntakeLog,
    ReminderDefinition,
    Weekday,
)
from health_tracker.medication.validation import ensure_valid, is_valid, validate_definition


def _definition(**kw) -> ReminderDefinition:
    data = dict(
        owner_id="u1",
        medicine_name="阿司匹林",
        dosage="100mg",
        frequency=Frequency.DAILY,
        times_of_day=[time(9, 0)],
        start_date=date(2024, 1, 1),
    )
    data.update(kw)
    return ReminderDefinition(**data)


def test_valid_definition() -> None:
    definition = _definition()
    assert validate_definition(definition) == []
    assert is_valid(definition)
    assert ensure_valid(definition) is definition


def test_reports_every_violated_field() -> None:
    definition = _definition(frequency=Frequency.WEEKLY, specific_days=[], dosage="  ")
    with pytest.raises(ValidationError) as exc:
        ensure_valid(definition)
    assert set(exc.value.fields) == {"specific_days", "dosage"}


def test_all_invariants() -> None:
    definition = _definition(
        medicine_name="",
        times_of_day=[],
        start_date=date(2024, 2, 1),
        end_date=date(2024, 1, 1),
    )
    fields = [e.field for e in validate_definition(definition)]
    assert fields == ["medicine_name", "times_of_day", "end_date"]


def test_daily_ignores_specific_days() -> None:
    assert is_valid(_definition(specific_days=[Weekday.FRI]))
    assert is_valid(_definition(end_date=date(2024, 1, 1)))


def test_payload_uses_wire_format() -> None:
    definition = _definition(
        id="r1",
        frequency=Frequency.WEEKLY,
        specific_days=[Weekday.WED, Weekday.MON],
        times_of_day=["21:00", "07:05"],
    )
    payload = definition.to_payload()
    assert "id" not in payload
    assert payload["specific_days"] == ["mon", "wed"]
    assert payload["times_of_day"] == ["07:05", "21:00"]
    assert payload["frequency"] == "weekly"
    assert payload["start_date"] == "2024-01-01"


def test_intake_log_never_pending() -> None:
    with pytest.raises(PydanticValidationError):
        IntakeLog(
            reminder_id="r1",
            scheduled_date=date(2024, 1, 1),
            scheduled_time=time(9, 0),
            status="pending",
            logged_at=datetime(2024, 1, 1, 9, 5, tzinfo=timezone.utc),
        )


def test_intake_log_naive_time_is_utc() -> None:
    log = IntakeLog.model_validate({
        "reminder_id": "r1",
        "scheduled_date": "2024-01-01",
        "scheduled_time": "09:00:00",
        "logged_at": "2024-01-01T09:05:00",
    })
    assert log.logged_at.tzinfo is not None
    assert log.key == ("r1", date(2024, 1, 1), time(9, 0))


def test_upcoming_window_includes_today() -> None:
    window = DateWindow.upcoming(date(2024, 12, 29), 7)
    assert window.start == date(2024, 12, 29)
    assert window.end == date(2025, 1, 4)
    assert date(2025, 1, 1) in window
