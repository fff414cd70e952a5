from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import month_bounds
from ..common.money import sum_money
from ..core.exceptions import NotFoundError
from ..database.unit_of_work import UnitOfWork
from ..employees.model import Employee
from .model import DeductionEntry, SalaryReportRow


@dataclass(frozen=True)
class EmployeeReport:
    employee: Employee
    month: int
    year: int
    attendances: Sequence[AttendanceRecord]
    deductions: Sequence[DeductionEntry]
    total_worked_minutes: int
    total_short_minutes: int
    total_salary: Decimal
    total_deductions: Decimal
    net_salary: Decimal


REPORT_COLUMNS = [
    "employee_id",
    "name",
    "total_worked_minutes",
    "total_short_minutes",
    "total_salary_earned",
]


class PayrollReportService:
    def __init__(self, uow: UnitOfWork):
        self._uow = uow

    def monthly_salary_report(self, month: int, year: int) -> list[SalaryReportRow]:
        """One row per employee with a summary for the month, by employee id."""
        month_bounds(month, year)
        with self._uow.transaction() as tx:
            summaries = tx.summaries.list_for_month(month, year)
            names = {e.employee_id: e.full_name for e in tx.employees.list_by_ids([s.employee_id for s in summaries])}

        return [
            SalaryReportRow(
                employee_id=s.employee_id,
                name=names.get(s.employee_id, "Unknown"),
                total_worked_minutes=s.total_worked_minutes,
                total_short_minutes=s.total_short_minutes,
                total_salary_earned=s.total_salary_earned,
            )
            for s in sorted(summaries, key=lambda s: s.employee_id)
        ]

    def monthly_report_dicts(self, month: int, year: int) -> list[dict]:
        return [
            {
                "employee_id": r.employee_id,
                "name": r.name,
                "total_worked_minutes": r.total_worked_minutes,
                "total_short_minutes": r.total_short_minutes,
                "total_salary_earned": f"{r.total_salary_earned:.2f}",
            }
            for r in self.monthly_salary_report(month, year)
        ]

    def employee_report(self, employee_id: int, month: int, year: int) -> EmployeeReport:
        """Attendances and deductions of one month.

        net_salary is what was earned; total_salary adds the deductions back
        (gross). Deductions belong to the month of their attendance date.
        """
        start, end = month_bounds(month, year)
        with self._uow.transaction() as tx:
            employee = tx.employees.get_by_id(employee_id)
            if not employee:
                raise NotFoundError("Employee not found")
            attendances = list(reversed(tx.attendance.list_for_employee(employee_id, start=start, end=end)))
            deductions = tx.deductions.list_for_employee(employee_id, start=start, end=end)

        finalized = [a for a in attendances if a.is_finalized]
        net = sum_money(a.salary_earned for a in finalized)
        total_deductions = sum_money(d.deducted_amount for d in deductions)
        return EmployeeReport(
            employee=employee,
            month=month,
            year=year,
            attendances=attendances,
            deductions=deductions,
            total_worked_minutes=sum(a.total_worked_minutes or 0 for a in finalized),
            total_short_minutes=sum(a.short_minutes or 0 for a in finalized),
            total_salary=net + total_deductions,
            total_deductions=total_deductions,
            net_salary=net,
        )
