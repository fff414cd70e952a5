from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from src.attendance_payroll.attendance_payroll.core.exceptions import NotFoundError
from tests.fakes import at


def test_missing_days_use_leave_first_then_go_unpaid(container, uow):
    result = container.missing_day_processor.process_missing_days(1, 3, 2026)

    # Mar 2-6 and Mar 9; today (Mar 10) is not charged yet.
    assert result.processed_days == 6
    assert result.leave_deducted == 1080
    assert result.short_minutes_added == 4 * 540

    by_day = {r.work_date: r for r in uow.state.attendance.values() if r.employee_id == 1}
    assert sorted(by_day) == [
        date(2026, 3, 2),
        date(2026, 3, 3),
        date(2026, 3, 4),
        date(2026, 3, 5),
        date(2026, 3, 6),
        date(2026, 3, 9),
    ]
    assert by_day[date(2026, 3, 2)].short_minutes == 0
    assert by_day[date(2026, 3, 2)].leave_minutes_applied == 540
    assert by_day[date(2026, 3, 4)].short_minutes == 540
    assert all(r.unpaid_leave and r.salary_earned == Decimal("0.00") for r in by_day.values())

    summary = uow.state.summaries[(1, 3, 2026)]
    assert summary.total_short_minutes == 2160
    assert summary.total_salary_earned == Decimal("0.00")


def test_running_twice_charges_once(container, uow):
    container.missing_day_processor.process_missing_days(1, 3, 2026)
    balance = uow.state.leave_balances[(1, 3, 2026)]

    again = container.missing_day_processor.process_missing_days(1, 3, 2026)
    assert again.processed_days == 0
    assert uow.state.leave_balances[(1, 3, 2026)] == balance


def test_worked_days_holidays_and_approved_leave_are_not_missing(container, uow, token):
    check_in, check_out = at(date(2026, 3, 2), 12, 0), at(date(2026, 3, 2), 21, 0)
    container.attendance_service.check_in(1, check_in, token(check_in))
    container.attendance_service.check_out(1, check_out, token(check_out))
    container.holiday_service.create_holiday(date(2026, 3, 4), "Founders Day")

    # Approved leave on a past date, e.g. entered before the day came.
    leave, _ = container.leave_service.request_leave(1, date(2026, 3, 10), 1)
    container.leave_service.approve_leave(leave.request_id)
    uow.state.leave_requests[leave.request_id] = replace(uow.state.leave_requests[leave.request_id], leave_date=date(2026, 3, 5))

    result = container.missing_day_processor.process_missing_days(1, 3, 2026)
    assert result.processed_days == 3


def test_placeholders_are_converted(container, uow):
    container.attendance_service.history(1, start=date(2026, 3, 2), end=date(2026, 3, 6))
    placeholders = len(uow.state.attendance)

    result = container.missing_day_processor.process_missing_days(1, 3, 2026)
    assert result.processed_days == 6
    assert len(uow.state.attendance) == placeholders + 1


def test_days_before_joining_are_not_charged(container, uow):
    uow.state.employees[1] = replace(uow.state.employees[1], joining_date=date(2026, 3, 6))

    result = container.missing_day_processor.process_missing_days(1, 3, 2026)
    assert result.processed_days == 2


def test_future_month_has_nothing_missing(container):
    assert container.missing_day_processor.process_missing_days(1, 4, 2026).processed_days == 0


def test_unknown_employee(container):
    with pytest.raises(NotFoundError):
        container.missing_day_processor.process_missing_days(77, 3, 2026)
