from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from ...attendance.rules import AttendanceRules
from ...common.money import ZERO, to_money
from .base import PayrollCalculator, SalaryCalculation


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: shortfall not covered by the month's leave is deducted pro rata.

    No monthly grace band: the running monthly shortfall minus available
    leave decides the uncovered part, and one day never deducts more than its
    own shortfall.
    """

    def __init__(self, rules: AttendanceRules):
        self._rules = rules

    def calculate(
        self,
        *,
        check_in: datetime,
        check_out: datetime,
        work_date: date,
        is_half_day: bool,
        daily_salary: Decimal,
        monthly_short_minutes_so_far: int,
        available_leave_minutes: int,
    ) -> SalaryCalculation:
        worked = self._rules.working_minutes(check_in, check_out, work_date)
        required = self._rules.required_minutes(is_half_day)
        short = max(0, required - worked)

        effective_salary = Decimal(daily_salary) * (Decimal("0.5") if is_half_day else Decimal(1))
        monthly_short = int(monthly_short_minutes_so_far) + short
        short_after_leave = max(0, monthly_short - max(0, int(available_leave_minutes)))
        deduction_minutes = min(short, short_after_leave)

        if required > 0 and deduction_minutes > 0:
            deducted = to_money(effective_salary * deduction_minutes / required)
        else:
            deducted = ZERO
        salary = to_money(max(Decimal(0), effective_salary - deducted))

        return SalaryCalculation(
            worked_minutes=worked,
            required_minutes=required,
            short_minutes=short,
            monthly_short_minutes=monthly_short,
            deduction_minutes=deduction_minutes,
            salary_earned=salary,
            deducted_amount=deducted,
        )
