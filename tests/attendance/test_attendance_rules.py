from datetime import date, time, timedelta, timezone

from src.attendance_payroll.attendance_payroll.attendance.rules import AttendanceRules, AttendanceRulesConfig
from tests.fakes import TZ, at

DAY = date(2026, 3, 10)


def make_rules() -> AttendanceRules:
    return AttendanceRules(
        AttendanceRulesConfig(
            standard_checkin=time(12, 0),
            late_threshold_minutes=15,
            half_day_threshold_minutes=60,
            max_working_minutes=540,
        ),
        TZ,
    )


def test_window_starts_at_standard_time_and_spans_max_minutes():
    window = make_rules().standard_window_for(DAY)
    assert window.start == at(DAY, 12, 0)
    assert window.end == at(DAY, 21, 0)


def test_classify_uses_strict_thresholds():
    rules = make_rules()

    on_time = rules.classify(at(DAY, 12, 15), DAY)
    assert not on_time.is_late and not on_time.is_half_day

    late = rules.classify(at(DAY, 12, 15, 1), DAY)
    assert late.is_late and not late.is_half_day

    exactly_hour = rules.classify(at(DAY, 13, 0), DAY)
    assert exactly_hour.is_late and not exactly_hour.is_half_day

    half_day = rules.classify(at(DAY, 13, 0, 1), DAY)
    assert half_day.is_late and half_day.is_half_day


def test_classify_accepts_instants_in_other_timezones():
    # 07:30 UTC is 12:30 in Karachi.
    moment = at(DAY, 12, 30).astimezone(timezone.utc)
    assert moment.hour == 7
    assert make_rules().classify(moment, DAY).is_late


def test_working_minutes_ignore_time_outside_the_window():
    rules = make_rules()
    assert rules.working_minutes(at(DAY, 11, 0), at(DAY, 20, 0), DAY) == 480
    assert rules.working_minutes(at(DAY, 12, 0), at(DAY, 23, 0), DAY) == 540
    assert rules.working_minutes(at(DAY, 9, 0), at(DAY, 11, 59), DAY) == 0
    assert rules.working_minutes(at(DAY, 21, 0), at(DAY, 22, 0), DAY) == 0


def test_working_minutes_floor_partial_minutes():
    rules = make_rules()
    assert rules.working_minutes(at(DAY, 12, 0), at(DAY, 12, 10, 59), DAY) == 10


def test_working_minutes_never_exceed_the_window():
    rules = make_rules()
    start = at(DAY, 8, 0)
    for offset in range(0, 16 * 60, 37):
        check_in = start + timedelta(minutes=offset)
        for length in (1, 59, 240, 600, 900):
            minutes = rules.working_minutes(check_in, check_in + timedelta(minutes=length), DAY)
            assert 0 <= minutes <= rules.required_minutes(False)


def test_required_minutes_halve_on_half_day():
    rules = make_rules()
    assert rules.required_minutes(False) == 540
    assert rules.required_minutes(True) == 270
