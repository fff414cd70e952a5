from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class SalaryCalculation:
    worked_minutes: int
    required_minutes: int
    short_minutes: int
    monthly_short_minutes: int
    deduction_minutes: int
    salary_earned: Decimal
    deducted_amount: Decimal


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
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
        raise NotImplementedError
