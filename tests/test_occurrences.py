"""提醒实例生成测试。"""
from datetime import date, time

from health_tracker.medication.models import DateWindow, Frequency, ReminderDefinition, Weekday
from health_tracker.medication.occurrences import clip_window, generate, generate_all


def _daily(**kw) -> ReminderDefinition:
    data = dict(
        id="r1",
        owner_id="u1",
        medicine_name="二甲双胍",
        dosage="1 片",
        frequency=Frequency.DAILY,
        times_of_day=[time(8, 0), time(20, 0)],
        start_date=date(2024, 1, 10),
    )
    data.update(kw)
    return ReminderDefinition(**data)


def test_daily_respects_start_and_end() -> None:
    definition = _daily(end_date=date(2024, 1, 12))
    out = generate(definition, DateWindow(date(2024, 1, 1), date(2024, 1, 31)))
    assert [(o.date.day, o.time) for o in out] == [
        (10, time(8, 0)), (10, time(20, 0)),
        (11, time(8, 0)), (11, time(20, 0)),
        (12, time(8, 0)), (12, time(20, 0)),
    ]
    assert all(o.reminder_id == "r1" for o in out)


def test_weekly_filters_days() -> None:
    definition = _daily(
        frequency=Frequency.WEEKLY,
        specific_days={Weekday.MON, Weekday.WED},
        times_of_day=[time(9, 0)],
        start_date=date(2024, 1, 1),
    )
    out = generate(definition, DateWindow(date(2024, 1, 1), date(2024, 1, 14)))
    assert [o.date for o in out] == [
        date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 8), date(2024, 1, 10),
    ]


def test_weekly_accepts_wire_values() -> None:
    definition = ReminderDefinition.model_validate({
        "id": "r2", "owner_id": "u1", "medicine_name": "维生素D", "dosage": "1 粒",
        "frequency": "weekly", "specific_days": ["sun"], "times_of_day": ["07:30"],
        "start_date": "2024-01-01",
    })
    out = generate(definition, DateWindow(date(2024, 1, 1), date(2024, 1, 14)))
    assert [o.date for o in out] == [date(2024, 1, 7), date(2024, 1, 14)]


def test_deterministic() -> None:
    definition = _daily(times_of_day=[time(20, 0), time(8, 0), time(8, 0)])
    window = DateWindow(date(2024, 1, 1), date(2024, 3, 1))
    assert generate(definition, window) == generate(definition, window)
    assert definition.times_of_day == (time(8, 0), time(20, 0))


def test_never_outside_definition_range() -> None:
    definition = _daily(start_date=date(2024, 2, 27), end_date=date(2024, 3, 2))
    out = generate(definition, DateWindow(date(2023, 12, 1), date(2024, 6, 30)))
    assert out
    assert min(o.date for o in out) == date(2024, 2, 27)
    assert max(o.date for o in out) == date(2024, 3, 2)
    # 闰年 2 月 29 日
    assert date(2024, 2, 29) in {o.date for o in out}
    assert len(out) == 5 * 2


def test_empty_when_window_before_start() -> None:
    definition = _daily()
    assert generate(definition, DateWindow(date(2024, 1, 1), date(2024, 1, 9))) == []
    assert clip_window(definition, DateWindow(date(2024, 1, 1), date(2024, 1, 9))).is_empty


def test_stops_after_deactivation_date() -> None:
    definition = _daily(active=False, deactivated_on=date(2024, 1, 11))
    out = generate(definition, DateWindow(date(2024, 1, 1), date(2024, 1, 31)))
    assert max(o.date for o in out) == date(2024, 1, 11)


def test_invalid_definition_fails_closed() -> None:
    broken = _daily(frequency=Frequency.WEEKLY, specific_days=[])
    good = _daily(id="r9")
    window = DateWindow(date(2024, 1, 10), date(2024, 1, 10))
    assert generate(broken, window) == []
    occ, problems = generate_all([broken, good], window)
    assert len(occ) == 2
    assert {o.reminder_id for o in occ} == {"r9"}
    assert len(problems) == 1
    assert problems[0].reminder_id == "r1"
    assert [p.field for p in problems[0].problems] == ["specific_days"]


def test_missing_id_fails_closed() -> None:
    occ, problems = generate_all([_daily(id=None)], DateWindow(date(2024, 1, 10), date(2024, 1, 11)))
    assert occ == []
    assert problems[0].reminder_id is None
