from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..common.money import ZERO
from ..database.mysql_base import as_decimal, as_int, as_optional_int, fetchall, fetchone
from .model import DeductionEntry, MonthlyAttendanceSummary
from .repository import DeductionLedgerRepository, MonthlySummaryRepository


def _to_summary(r) -> MonthlyAttendanceSummary:
    return MonthlyAttendanceSummary(
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        total_worked_minutes=as_int(r["total_worked_minutes"]),
        total_short_minutes=as_int(r["total_short_minutes"]),
        total_salary_earned=as_decimal(r["total_salary_earned"]) or ZERO,
    )


class MySQLMonthlySummaryRepository(MonthlySummaryRepository):
    def __init__(self, cur):
        self._cur = cur

    def get(self, employee_id: int, month: int, year: int) -> Optional[MonthlyAttendanceSummary]:
        self._cur.execute(
            """
            SELECT employee_id, month, year, total_worked_minutes, total_short_minutes, total_salary_earned
            FROM monthly_attendance_summaries
            WHERE employee_id=%s AND month=%s AND year=%s
            """,
            (employee_id, month, year),
        )
        r = fetchone(self._cur)
        return _to_summary(r) if r else None

    def upsert(self, summary: MonthlyAttendanceSummary) -> None:
        self._cur.execute(
            """
            INSERT INTO monthly_attendance_summaries(
                employee_id, month, year, total_worked_minutes, total_short_minutes, total_salary_earned
            )
            VALUES(%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                total_worked_minutes=VALUES(total_worked_minutes),
                total_short_minutes=VALUES(total_short_minutes),
                total_salary_earned=VALUES(total_salary_earned)
            """,
            (
                summary.employee_id,
                summary.month,
                summary.year,
                summary.total_worked_minutes,
                summary.total_short_minutes,
                summary.total_salary_earned,
            ),
        )

    def list_for_month(self, month: int, year: int) -> Sequence[MonthlyAttendanceSummary]:
        self._cur.execute(
            """
            SELECT employee_id, month, year, total_worked_minutes, total_short_minutes, total_salary_earned
            FROM monthly_attendance_summaries
            WHERE month=%s AND year=%s
            ORDER BY employee_id
            """,
            (month, year),
        )
        return [_to_summary(r) for r in fetchall(self._cur)]


class MySQLDeductionLedgerRepository(DeductionLedgerRepository):
    def __init__(self, cur):
        self._cur = cur

    def add(
        self,
        *,
        employee_id: int,
        attendance_id: int,
        deducted_minutes: int,
        deducted_amount: Decimal,
        reason: Optional[str],
        created_at: datetime,
    ) -> int:
        self._cur.execute(
            """
            INSERT INTO salary_deduction_ledger(
                employee_id, attendance_id, deducted_minutes, deducted_amount, reason, created_at
            )
            VALUES(%s,%s,%s,%s,%s,%s)
            """,
            (employee_id, attendance_id, deducted_minutes, deducted_amount, reason, to_utc_naive(created_at)),
        )
        return int(self._cur.lastrowid)

    def delete_for_attendance(self, attendance_id: int) -> int:
        self._cur.execute("DELETE FROM salary_deduction_ledger WHERE attendance_id=%s", (attendance_id,))
        return int(self._cur.rowcount or 0)

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[DeductionEntry]:
        sql = """
            SELECT d.deduction_id, d.employee_id, d.attendance_id, d.deducted_minutes,
                   d.deducted_amount, d.reason, d.created_at, a.work_date
            FROM salary_deduction_ledger d
            JOIN attendance_records a ON a.attendance_id = d.attendance_id
            WHERE d.employee_id=%s AND a.deleted_at IS NULL
        """
        params: list = [employee_id]
        if start is not None:
            sql += " AND a.work_date >= %s"
            params.append(start)
        if end is not None:
            sql += " AND a.work_date <= %s"
            params.append(end)
        sql += " ORDER BY a.work_date DESC, d.deduction_id DESC"
        self._cur.execute(sql, tuple(params))
        return [
            DeductionEntry(
                deduction_id=int(r["deduction_id"]),
                employee_id=int(r["employee_id"]),
                attendance_id=as_optional_int(r.get("attendance_id")),
                deducted_minutes=int(r["deducted_minutes"]),
                deducted_amount=as_decimal(r["deducted_amount"]),
                reason=r.get("reason"),
                created_at=from_utc_naive(r["created_at"]),
                work_date=r.get("work_date"),
            )
            for r in fetchall(self._cur)
        ]
