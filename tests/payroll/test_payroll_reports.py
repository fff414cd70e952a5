from datetime import date
from decimal import Decimal

import pytest

from src.attendance_payroll.attendance_payroll.core.exceptions import NotFoundError, ValidationError
from tests.fakes import at, set_balance

DAY = date(2026, 3, 10)


@pytest.fixture
def worked_month(container, uow, token):
    set_balance(uow, 1, 3, 2026, balance=1080, utilized=1080)
    for employee_id, out_hour in ((1, 20), (2, 21)):
        check_in, check_out = at(DAY, 12, 0), at(DAY, out_hour, 0)
        container.attendance_service.check_in(employee_id, check_in, token(check_in))
        container.attendance_service.check_out(employee_id, check_out, token(check_out))
    return container


def test_monthly_report_has_one_row_per_employee(worked_month):
    rows = worked_month.payroll_report_service.monthly_salary_report(3, 2026)
    assert [(r.employee_id, r.name) for r in rows] == [(1, "Ayesha Khan"), (2, "Bilal Ahmed")]
    assert rows[0].total_salary_earned == Decimal("888.89")
    assert rows[0].total_short_minutes == 60
    assert rows[1].total_salary_earned == Decimal("1500.00")


def test_monthly_report_dicts_format_money(worked_month):
    [first, _] = worked_month.payroll_report_service.monthly_report_dicts(3, 2026)
    assert first["total_salary_earned"] == "888.89"


def test_employee_report_splits_net_and_deductions(worked_month):
    report = worked_month.payroll_report_service.employee_report(1, 3, 2026)
    assert report.net_salary == Decimal("888.89")
    assert report.total_deductions == Decimal("111.11")
    assert report.total_salary == Decimal("1000.00")
    assert report.total_worked_minutes == 480
    assert len(report.attendances) == 1
    assert len(report.deductions) == 1


def test_empty_month(container):
    assert container.payroll_report_service.monthly_salary_report(1, 2026) == []
    report = container.payroll_report_service.employee_report(2, 1, 2026)
    assert report.net_salary == Decimal("0.00")
    assert report.attendances == []


def test_report_errors(container):
    with pytest.raises(NotFoundError):
        container.payroll_report_service.employee_report(55, 3, 2026)
    with pytest.raises(ValidationError):
        container.payroll_report_service.monthly_salary_report(13, 2026)
