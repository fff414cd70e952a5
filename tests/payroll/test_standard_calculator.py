from datetime import date, time
from decimal import Decimal

from src.attendance_payroll.attendance_payroll.attendance.rules import AttendanceRules, AttendanceRulesConfig
from src.attendance_payroll.attendance_payroll.payroll.calculator.standard_calculator import StandardPayrollCalculator
from tests.fakes import TZ, at

DAY = date(2026, 3, 10)


def make_calculator() -> StandardPayrollCalculator:
    rules = AttendanceRules(AttendanceRulesConfig(standard_checkin=time(12, 0)), TZ)
    return StandardPayrollCalculator(rules)


def calculate(check_in, check_out, *, half_day=False, so_far=0, available=0, salary="1000.00"):
    return make_calculator().calculate(
        check_in=check_in,
        check_out=check_out,
        work_date=DAY,
        is_half_day=half_day,
        daily_salary=Decimal(salary),
        monthly_short_minutes_so_far=so_far,
        available_leave_minutes=available,
    )


def test_uncovered_shortfall_is_deducted_pro_rata():
    calc = calculate(at(DAY, 12, 0), at(DAY, 20, 0))
    assert calc.worked_minutes == 480
    assert calc.required_minutes == 540
    assert calc.short_minutes == 60
    assert calc.deduction_minutes == 60
    assert calc.deducted_amount == Decimal("111.11")
    assert calc.salary_earned == Decimal("888.89")


def test_leave_covering_the_shortfall_means_full_pay():
    calc = calculate(at(DAY, 12, 0), at(DAY, 20, 0), available=60)
    assert calc.deduction_minutes == 0
    assert calc.deducted_amount == Decimal("0.00")
    assert calc.salary_earned == Decimal("1000.00")


def test_partial_leave_cover_deducts_the_rest():
    calc = calculate(at(DAY, 12, 0), at(DAY, 20, 0), available=30)
    assert calc.deduction_minutes == 30
    assert calc.deducted_amount == Decimal("55.56")
    assert calc.salary_earned == Decimal("944.44")


def test_no_shortfall_never_deducts_even_with_month_in_arrears():
    calc = calculate(at(DAY, 11, 30), at(DAY, 21, 30), so_far=2000, available=0)
    assert calc.short_minutes == 0
    assert calc.deduction_minutes == 0
    assert calc.salary_earned == Decimal("1000.00")


def test_deduction_is_capped_by_the_days_own_shortfall():
    calc = calculate(at(DAY, 12, 0), at(DAY, 20, 0), so_far=120, available=100)
    assert calc.monthly_short_minutes == 180
    assert calc.deduction_minutes == 60


def test_half_day_requires_half_the_window_at_half_the_salary():
    calc = calculate(at(DAY, 13, 30), at(DAY, 18, 0), half_day=True)
    assert calc.required_minutes == 270
    assert calc.worked_minutes == 270
    assert calc.short_minutes == 0
    assert calc.salary_earned == Decimal("500.00")


def test_half_day_shortfall_is_deducted_from_the_half_salary():
    calc = calculate(at(DAY, 13, 30), at(DAY, 17, 0), half_day=True)
    assert calc.short_minutes == 60
    # 500 * 60 / 270
    assert calc.deducted_amount == Decimal("111.11")
    assert calc.salary_earned == Decimal("388.89")


def test_salary_is_never_negative():
    calc = calculate(at(DAY, 12, 0), at(DAY, 12, 1))
    assert calc.salary_earned >= Decimal("0.00")
    assert calc.deducted_amount <= Decimal("1000.00")
