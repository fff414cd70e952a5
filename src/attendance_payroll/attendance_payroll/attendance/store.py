from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import month_bounds
from ..common.money import ZERO, sum_money, to_money
from ..common.working_days import working_days_between
from ..database.unit_of_work import Repositories
from ..payroll.model import MonthlyAttendanceSummary
from .model import AttendanceRecord, NewAttendance

logger = logging.getLogger(__name__)


class AttendanceRecordStore:
    """Record lifecycle plus the derived summary and deduction ledger.

    Stateless: every method runs against the repositories of the caller's
    unit of work, so record, summary and ledger writes commit together.
    """

    def recalculate_summary(self, tx: Repositories, employee_id: int, month: int, year: int) -> MonthlyAttendanceSummary:
        start, end = month_bounds(month, year)
        finalized = [r for r in tx.attendance.list_for_employee(employee_id, start=start, end=end) if r.is_finalized]
        summary = MonthlyAttendanceSummary(
            employee_id=employee_id,
            month=month,
            year=year,
            total_worked_minutes=sum(r.total_worked_minutes or 0 for r in finalized),
            total_short_minutes=sum(r.short_minutes or 0 for r in finalized),
            total_salary_earned=sum_money(r.salary_earned for r in finalized),
        )
        tx.summaries.upsert(summary)
        return summary

    def recalculate_for(self, tx: Repositories, record: AttendanceRecord) -> MonthlyAttendanceSummary:
        return self.recalculate_summary(tx, record.employee_id, record.work_date.month, record.work_date.year)

    def month_short_minutes(
        self,
        tx: Repositories,
        employee_id: int,
        month: int,
        year: int,
        *,
        exclude_attendance_id: Optional[int] = None,
    ) -> int:
        """Short minutes of the month's other finalized records."""
        start, end = month_bounds(month, year)
        return sum(
            r.short_minutes or 0
            for r in tx.attendance.list_for_employee(employee_id, start=start, end=end)
            if r.is_finalized and r.attendance_id != exclude_attendance_id
        )

    def replace_deduction(
        self,
        tx: Repositories,
        record: AttendanceRecord,
        *,
        deducted_minutes: int,
        deducted_amount: Decimal,
        reason: str,
        created_at: datetime,
    ) -> None:
        tx.deductions.delete_for_attendance(record.attendance_id)
        if deducted_minutes > 0 and deducted_amount > 0:
            tx.deductions.add(
                employee_id=record.employee_id,
                attendance_id=record.attendance_id,
                deducted_minutes=deducted_minutes,
                deducted_amount=to_money(deducted_amount),
                reason=reason,
                created_at=created_at,
            )

    def holiday_dates(self, tx: Repositories, start: date, end: date) -> set[date]:
        return {h.holiday_date for h in tx.holidays.list_between(start, end)}

    def ensure_placeholder(self, tx: Repositories, employee_id: int, day: date) -> AttendanceRecord:
        existing = tx.attendance.get_for_employee_and_date(employee_id, day)
        if existing is not None:
            return existing
        return tx.attendance.create(NewAttendance(employee_id=employee_id, work_date=day, is_active=False))

    def backfill_placeholders(
        self,
        tx: Repositories,
        employee_id: int,
        start: date,
        end: date,
        *,
        today: date,
    ) -> list[AttendanceRecord]:
        """Create empty placeholders for past working days without a record."""
        last = min(end, today - timedelta(days=1))
        if last < start:
            return []
        existing = {r.work_date for r in tx.attendance.list_for_employee(employee_id, start=start, end=last)}
        created = []
        for day in working_days_between(start, last, self.holiday_dates(tx, start, last)):
            if day not in existing:
                created.append(
                    tx.attendance.create(NewAttendance(employee_id=employee_id, work_date=day, is_active=False))
                )
        if created:
            logger.debug("Backfilled %s placeholders for employee %s", len(created), employee_id)
        return created

    def missing_days(
        self,
        tx: Repositories,
        employee_id: int,
        start: date,
        end: date,
        *,
        today: date,
        skip: Iterable[date] = (),
    ) -> list[tuple[date, Optional[AttendanceRecord]]]:
        """Past working days with no record, or only a never-used placeholder."""
        last = min(end, today - timedelta(days=1))
        if last < start:
            return []
        by_day = {r.work_date: r for r in tx.attendance.list_for_employee(employee_id, start=start, end=last)}
        skipped = set(skip)
        result = []
        for day in working_days_between(start, last, self.holiday_dates(tx, start, last)):
            if day in skipped:
                continue
            record = by_day.get(day)
            if record is None or record.is_placeholder:
                result.append((day, record))
        return result

    def write_absence(
        self,
        tx: Repositories,
        employee_id: int,
        day: date,
        *,
        short_minutes: int,
        leave_minutes_applied: int = 0,
        existing: Optional[AttendanceRecord] = None,
    ) -> AttendanceRecord:
        """Unpaid-leave record: no work, no pay, `short_minutes` charged."""
        if existing is not None:
            record = existing.with_changes(
                check_in_time=None,
                check_out_time=None,
                total_worked_minutes=0,
                short_minutes=short_minutes,
                salary_earned=ZERO,
                is_late=False,
                is_half_day=False,
                is_public_holiday=False,
                unpaid_leave=True,
                is_active=True,
                leave_minutes_applied=leave_minutes_applied,
            )
            tx.attendance.save(record)
            return record
        return tx.attendance.create(
            NewAttendance(
                employee_id=employee_id,
                work_date=day,
                total_worked_minutes=0,
                short_minutes=short_minutes,
                salary_earned=ZERO,
                unpaid_leave=True,
                is_active=True,
                leave_minutes_applied=leave_minutes_applied,
            )
        )

    def soft_delete(self, tx: Repositories, record: AttendanceRecord, *, deleted_at: datetime) -> bool:
        return tx.attendance.soft_delete(record.attendance_id, deleted_at=deleted_at)

    def list_range(
        self,
        tx: Repositories,
        employee_id: int,
        start: date,
        end: date,
    ) -> Sequence[AttendanceRecord]:
        return tx.attendance.list_for_employee(employee_id, start=start, end=end)
