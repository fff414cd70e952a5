from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.money import ZERO


@dataclass(frozen=True)
class MonthlyAttendanceSummary:
    """Derived aggregate of one employee-month; always recomputed, never patched."""

    employee_id: int
    month: int
    year: int
    total_worked_minutes: int = 0
    total_short_minutes: int = 0
    total_salary_earned: Decimal = ZERO


@dataclass(frozen=True)
class DeductionEntry:
    """Salary deduction ledger row for one attendance record."""

    deduction_id: int
    employee_id: int
    attendance_id: Optional[int]
    deducted_minutes: int
    deducted_amount: Decimal
    reason: Optional[str]
    created_at: datetime
    work_date: Optional[date] = None


@dataclass(frozen=True)
class SalaryReportRow:
    employee_id: int
    name: str
    total_worked_minutes: int
    total_short_minutes: int
    total_salary_earned: Decimal
