from datetime import date, timedelta
from decimal import Decimal

import pytest

from src.attendance_payroll.attendance_payroll.core.exceptions import (
    AccountInactiveError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from tests.fakes import at, set_balance

TODAY = date(2026, 3, 10)


def test_check_in_on_time(container, token):
    moment = at(TODAY, 12, 5)
    record = container.attendance_service.check_in(1, moment, token(moment))
    assert record.work_date == TODAY
    assert record.check_in_time == moment
    assert record.check_out_time is None
    assert not record.is_late
    assert not record.is_half_day


def test_late_check_in_is_flagged(container, token):
    moment = at(TODAY, 12, 20)
    record = container.attendance_service.check_in(1, moment, token(moment))
    assert record.is_late
    assert not record.is_half_day


def test_check_in_activates_todays_placeholder(container, uow, token):
    status = container.attendance_service.today_status(1)
    assert status.record.is_placeholder

    moment = at(TODAY, 12, 0)
    record = container.attendance_service.check_in(1, moment, token(moment))
    assert record.attendance_id == status.record.attendance_id
    assert record.is_active
    assert len([r for r in uow.state.attendance.values() if r.employee_id == 1]) == 1


def test_second_check_in_conflicts(container, token):
    moment = at(TODAY, 12, 0)
    container.attendance_service.check_in(1, moment, token(moment))
    later = moment + timedelta(minutes=1)
    with pytest.raises(ConflictError):
        container.attendance_service.check_in(1, later, token(later))


def test_bad_qr_token_writes_nothing(container, uow, token):
    moment = at(TODAY, 12, 0)
    with pytest.raises(ValidationError):
        container.attendance_service.check_in(1, moment, moment.isoformat() + "WRONG_SUFFIX")
    with pytest.raises(ValidationError):
        container.attendance_service.check_in(1, moment, token(moment - timedelta(minutes=10)))
    assert uow.state.attendance == {}


def test_inactive_employee_cannot_check_in(container, token):
    moment = at(TODAY, 12, 0)
    with pytest.raises(AccountInactiveError):
        container.attendance_service.check_in(3, moment, token(moment))


def test_unknown_employee(container, token):
    moment = at(TODAY, 12, 0)
    with pytest.raises(NotFoundError):
        container.attendance_service.check_in(99, moment, token(moment))


def test_check_out_without_check_in(container, token):
    moment = at(TODAY, 20, 0)
    with pytest.raises(StateError):
        container.attendance_service.check_out(1, moment, token(moment))


def test_check_out_must_follow_check_in(container, token):
    moment = at(TODAY, 12, 0)
    container.attendance_service.check_in(1, moment, token(moment))
    with pytest.raises(StateError):
        container.attendance_service.check_out(1, moment, token(moment))


def test_check_out_twice(container, token):
    check_in, check_out = at(TODAY, 12, 0), at(TODAY, 21, 0)
    container.attendance_service.check_in(1, check_in, token(check_in))
    container.attendance_service.check_out(1, check_out, token(check_out))
    later = check_out + timedelta(minutes=1)
    with pytest.raises(StateError):
        container.attendance_service.check_out(1, later, token(later))


def test_shortfall_covered_by_leave(container, uow, token):
    check_in, check_out = at(TODAY, 12, 0), at(TODAY, 20, 0)
    container.attendance_service.check_in(1, check_in, token(check_in))
    record, calc = container.attendance_service.check_out(1, check_out, token(check_out))

    assert calc.worked_minutes == 480
    assert calc.short_minutes == 60
    assert calc.deduction_minutes == 0
    assert record.salary_earned == Decimal("1000.00")
    assert record.leave_minutes_applied == 60
    assert uow.state.leave_balances[(1, 3, 2026)].utilized_minutes == 60
    assert uow.state.deductions == {}


def test_shortfall_without_leave_is_deducted(container, uow, token):
    set_balance(uow, 1, 3, 2026, balance=1080, utilized=1080)
    check_in, check_out = at(TODAY, 12, 0), at(TODAY, 20, 0)
    container.attendance_service.check_in(1, check_in, token(check_in))
    record, calc = container.attendance_service.check_out(1, check_out, token(check_out))

    assert record.salary_earned == Decimal("888.89")
    assert record.leave_minutes_applied == 0
    [entry] = uow.state.deductions.values()
    assert entry.attendance_id == record.attendance_id
    assert entry.deducted_minutes == 60
    assert entry.deducted_amount == Decimal("111.11")

    summary = uow.state.summaries[(1, 3, 2026)]
    assert summary.total_worked_minutes == 480
    assert summary.total_short_minutes == 60
    assert summary.total_salary_earned == Decimal("888.89")


def test_half_day_check_out(container, token):
    check_in, check_out = at(TODAY, 13, 30), at(TODAY, 18, 0)
    record = container.attendance_service.check_in(2, check_in, token(check_in))
    assert record.is_half_day

    record, calc = container.attendance_service.check_out(2, check_out, token(check_out))
    assert calc.required_minutes == 270
    assert record.salary_earned == Decimal("750.00")


def test_check_in_on_unpaid_leave_day_conflicts(container, token):
    leave_day = date(2026, 3, 11)
    leave, _ = container.leave_service.request_leave(1, leave_day, "2.5")
    container.leave_service.approve_leave(leave.request_id)

    moment = at(leave_day, 12, 0)
    with pytest.raises(ConflictError):
        container.attendance_service.check_in(1, moment, token(moment))


def test_last_leave_minutes_still_leave_the_day_deducted(container, uow, token):
    set_balance(uow, 1, 3, 2026, balance=1080, utilized=980)
    for day in (TODAY - timedelta(days=1), TODAY):
        check_in, check_out = at(day, 12, 0), at(day, 20, 0)
        container.attendance_service.check_in(1, check_in, token(check_in))
        record, calc = container.attendance_service.check_out(1, check_out, token(check_out))

    # The monthly formula charges leave and deduction for the same 40 minutes.
    assert record.leave_minutes_applied == 40
    assert calc.monthly_short_minutes == 120
    assert calc.deduction_minutes == 60
    assert record.salary_earned == Decimal("888.89")
    assert uow.state.leave_balances[(1, 3, 2026)].utilized_minutes == 1080
