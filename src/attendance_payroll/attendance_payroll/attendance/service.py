from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, end_of_day, local_date, month_bounds
from ..common.money import ZERO, sum_money
from ..common.qr_token import QRTokenCodec
from ..common.working_days import count_working_days, is_working_day, working_days_between
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import NextAction
from ..core.exceptions import (
    AccountInactiveError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from ..database.unit_of_work import Repositories, UnitOfWork
from ..employees.model import Employee
from ..jobs.missing_days import MissingDayProcessor
from ..leaves.ledger import LeaveBalanceLedger
from ..leaves.model import BalanceView, LeaveRequest
from ..payroll.calculator.base import PayrollCalculator, SalaryCalculation
from ..payroll.model import MonthlyAttendanceSummary
from .model import AttendanceRecord, NewAttendance
from .rules import AttendanceRules, Classification
from .store import AttendanceRecordStore

logger = logging.getLogger(__name__)

MAX_HISTORY_RANGE_DAYS = 366


@dataclass(frozen=True)
class TodayStatus:
    work_date: date
    record: Optional[AttendanceRecord]
    next_action: NextAction


@dataclass(frozen=True)
class EmployeeDashboard:
    employee: Employee
    month: int
    year: int
    summary: MonthlyAttendanceSummary
    working_days: int
    past_working_days: int
    attended_days: int
    absent_days: int
    leave_balance: BalanceView
    leave_requests: Sequence[LeaveRequest]
    total_deductions: Decimal
    today: TodayStatus


class AttendanceService:
    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        rules: AttendanceRules,
        calculator: PayrollCalculator,
        ledger: LeaveBalanceLedger,
        store: AttendanceRecordStore,
        qr_codec: QRTokenCodec,
        missing_days: MissingDayProcessor,
    ):
        self._uow = uow
        self._clock = clock
        self._rules = rules
        self._calculator = calculator
        self._ledger = ledger
        self._store = store
        self._qr = qr_codec
        self._missing_days = missing_days

    # ----- helpers -----

    @staticmethod
    def _employee(tx: Repositories, employee_id: int) -> Employee:
        employee = tx.employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _active_employee(self, tx: Repositories, employee_id: int) -> Employee:
        employee = self._employee(tx, employee_id)
        if not employee.is_active:
            raise AccountInactiveError("Employee account is inactive")
        return employee

    def _finalize(
        self,
        tx: Repositories,
        record: AttendanceRecord,
        employee: Employee,
        *,
        check_in: datetime,
        check_out: datetime,
        reason: str,
    ) -> tuple[AttendanceRecord, SalaryCalculation]:
        """Compute salary for a fully specified day and persist record, ledger and summary."""
        month, year = record.work_date.month, record.work_date.year
        balances = tx.leave_balances

        if record.leave_minutes_applied:
            self._ledger.release(balances, employee.employee_id, month, year, record.leave_minutes_applied)

        so_far = self._store.month_short_minutes(
            tx, employee.employee_id, month, year, exclude_attendance_id=record.attendance_id
        )
        if record.is_public_holiday:
            # Times are kept; the day itself stays at zero worked, zero short, zero pay.
            classification = Classification(is_late=False, is_half_day=False)
            calc = SalaryCalculation(
                worked_minutes=0,
                required_minutes=0,
                short_minutes=0,
                monthly_short_minutes=so_far,
                deduction_minutes=0,
                salary_earned=ZERO,
                deducted_amount=ZERO,
            )
            applied = 0
        else:
            classification = self._rules.classify(check_in, record.work_date)
            available = self._ledger.available_minutes(
                balances, employee.employee_id, month, year, employee.joining_date
            )
            calc = self._calculator.calculate(
                check_in=check_in,
                check_out=check_out,
                work_date=record.work_date,
                is_half_day=classification.is_half_day,
                daily_salary=employee.daily_salary,
                monthly_short_minutes_so_far=so_far,
                available_leave_minutes=available,
            )

            applied = min(calc.short_minutes, available)
            if applied:
                used = self._ledger.utilize(balances, employee.employee_id, month, year, applied)
                if not used.success:
                    applied = 0

        updated = record.with_changes(
            check_in_time=check_in,
            check_out_time=check_out,
            total_worked_minutes=calc.worked_minutes,
            short_minutes=calc.short_minutes,
            salary_earned=calc.salary_earned,
            is_late=classification.is_late,
            is_half_day=classification.is_half_day,
            unpaid_leave=False,
            is_active=True,
            leave_minutes_applied=applied,
        )
        tx.attendance.save(updated)
        self._store.replace_deduction(
            tx,
            updated,
            deducted_minutes=calc.deduction_minutes,
            deducted_amount=calc.deducted_amount,
            reason=reason,
            created_at=self._clock.now(),
        )
        self._store.recalculate_for(tx, updated)
        return updated, calc

    # ----- employee actions -----

    def check_in(self, employee_id: int, timestamp: datetime, qr_token: str) -> AttendanceRecord:
        self._qr.validate(qr_token, timestamp)
        work_date = local_date(timestamp, self._clock.tz)

        with self._uow.transaction() as tx:
            self._active_employee(tx, employee_id)
            classification = self._rules.classify(timestamp, work_date)

            existing = tx.attendance.get_for_employee_and_date(employee_id, work_date, for_update=True)
            if existing is not None:
                if existing.check_in_time is not None:
                    raise ConflictError("Already checked in today")
                if existing.unpaid_leave:
                    raise ConflictError("Unpaid leave is recorded for this date")
                if existing.is_public_holiday:
                    classification = Classification(is_late=False, is_half_day=False)
                record = existing.with_changes(
                    check_in_time=timestamp,
                    is_late=classification.is_late,
                    is_half_day=classification.is_half_day,
                    is_active=True,
                )
                tx.attendance.save(record)
            else:
                record = tx.attendance.create(
                    NewAttendance(
                        employee_id=employee_id,
                        work_date=work_date,
                        check_in_time=timestamp,
                        is_late=classification.is_late,
                        is_half_day=classification.is_half_day,
                    )
                )

        logger.info("Employee %s checked in for %s (late=%s)", employee_id, work_date, record.is_late)
        return record

    def check_out(self, employee_id: int, timestamp: datetime, qr_token: str) -> tuple[AttendanceRecord, SalaryCalculation]:
        self._qr.validate(qr_token, timestamp)
        work_date = local_date(timestamp, self._clock.tz)

        with self._uow.transaction() as tx:
            employee = self._active_employee(tx, employee_id)
            record = tx.attendance.get_for_employee_and_date(employee_id, work_date, for_update=True)
            if record is None or record.check_in_time is None:
                raise StateError("No check-in found for today")
            if record.check_out_time is not None:
                raise StateError("Already checked out today")
            if timestamp <= record.check_in_time:
                raise StateError("Check-out time must be after check-in time")

            result = self._finalize(
                tx,
                record,
                employee,
                check_in=record.check_in_time,
                check_out=timestamp,
                reason="Short minutes not covered by leave",
            )

        logger.info(
            "Employee %s checked out for %s: worked=%s short=%s salary=%s",
            employee_id, work_date, result[1].worked_minutes, result[1].short_minutes, result[1].salary_earned,
        )
        return result

    # ----- admin actions -----

    def admin_create(
        self,
        employee_id: int,
        work_date: date,
        check_in: datetime,
        check_out: datetime,
    ) -> tuple[AttendanceRecord, SalaryCalculation]:
        if check_out <= check_in:
            raise StateError("Check-out time must be after check-in time")

        with self._uow.transaction() as tx:
            employee = self._employee(tx, employee_id)
            existing = tx.attendance.get_for_employee_and_date(employee_id, work_date, for_update=True)
            if existing is not None and not existing.is_placeholder:
                raise ConflictError("Attendance already exists for this employee and date. Use update instead.")
            record = existing or tx.attendance.create(
                NewAttendance(employee_id=employee_id, work_date=work_date, is_active=False)
            )
            return self._finalize(
                tx,
                record,
                employee,
                check_in=check_in,
                check_out=check_out,
                reason="Admin entry: short minutes not covered by leave",
            )

    def admin_correct(
        self,
        attendance_id: int,
        *,
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
    ) -> tuple[AttendanceRecord, SalaryCalculation]:
        with self._uow.transaction() as tx:
            record = tx.attendance.get(attendance_id, for_update=True)
            if record is None:
                raise NotFoundError("Attendance record not found")

            new_in = check_in or record.check_in_time
            new_out = check_out or record.check_out_time
            if new_in is None or new_out is None:
                raise ValidationError("Both check-in and check-out are required to recalculate salary")
            if new_out <= new_in:
                raise StateError("Check-out time must be after check-in time")

            employee = self._employee(tx, record.employee_id)
            result = self._finalize(
                tx,
                record,
                employee,
                check_in=new_in,
                check_out=new_out,
                reason="Admin correction: short minutes not covered by leave",
            )

        logger.info("Attendance %s corrected by admin", attendance_id)
        return result

    def delete_attendance(self, attendance_id: int) -> AttendanceRecord:
        """Soft-delete a record; the month is recomputed only if the record counted toward it."""
        with self._uow.transaction() as tx:
            record = tx.attendance.get(attendance_id, for_update=True)
            if record is None:
                raise NotFoundError("Attendance record not found")

            self._store.soft_delete(tx, record, deleted_at=self._clock.now())
            tx.deductions.delete_for_attendance(record.attendance_id)
            if record.leave_minutes_applied:
                self._ledger.release(
                    tx.leave_balances,
                    record.employee_id,
                    record.work_date.month,
                    record.work_date.year,
                    record.leave_minutes_applied,
                )
            if record.is_finalized:
                self._store.recalculate_for(tx, record)

        logger.info("Attendance %s deleted (recalculated=%s)", attendance_id, record.is_finalized)
        return record

    # ----- scheduler -----

    def auto_checkout(self, employee_id: int, for_date: date) -> Optional[AttendanceRecord]:
        """Close a day left checked-in at the end of that day; no-op otherwise."""
        checkout_at = end_of_day(for_date, self._clock.tz)
        with self._uow.transaction() as tx:
            record = tx.attendance.get_for_employee_and_date(employee_id, for_date, for_update=True)
            if record is None or not record.is_checked_in:
                return None
            if checkout_at <= record.check_in_time:
                logger.warning("Skipping auto checkout of attendance %s: check-in at end of day", record.attendance_id)
                return None
            employee = self._employee(tx, employee_id)
            updated, _ = self._finalize(
                tx,
                record,
                employee,
                check_in=record.check_in_time,
                check_out=checkout_at,
                reason="Auto checkout: short minutes not covered by leave",
            )
        return updated

    # ----- read side -----

    @staticmethod
    def _next_action(record: Optional[AttendanceRecord]) -> NextAction:
        if record is None:
            return NextAction.CHECK_IN
        if record.unpaid_leave or record.is_checked_out:
            return NextAction.NONE
        if record.is_checked_in:
            return NextAction.CHECK_OUT
        return NextAction.CHECK_IN

    def _today_in(self, tx: Repositories, employee_id: int) -> TodayStatus:
        today = self._clock.today()
        record = tx.attendance.get_for_employee_and_date(employee_id, today)
        if record is None and is_working_day(today, self._store.holiday_dates(tx, today, today)):
            record = self._store.ensure_placeholder(tx, employee_id, today)
        return TodayStatus(work_date=today, record=record, next_action=self._next_action(record))

    def today_status(self, employee_id: int) -> TodayStatus:
        with self._uow.transaction() as tx:
            self._employee(tx, employee_id)
            return self._today_in(tx, employee_id)

    def history(
        self,
        employee_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records in [start, end], newest first; past working days without a record get placeholders."""
        today = self._clock.today()
        end = end or today
        start = start or end - timedelta(days=DEFAULT_HISTORY_LIMIT - 1)
        if start > end:
            raise ValidationError("Start date must not be after end date")
        if (end - start).days >= MAX_HISTORY_RANGE_DAYS:
            raise ValidationError(f"Date range must not exceed {MAX_HISTORY_RANGE_DAYS} days")

        with self._uow.transaction() as tx:
            employee = self._employee(tx, employee_id)
            backfill_start = max(start, employee.joining_date) if employee.joining_date else start
            self._store.backfill_placeholders(tx, employee_id, backfill_start, end, today=today)
            return self._store.list_range(tx, employee_id, start, end)

    def dashboard(self, employee_id: int) -> EmployeeDashboard:
        today = self._clock.today()
        month, year = today.month, today.year
        start, end = month_bounds(month, year)

        with self._uow.transaction() as tx:
            employee = self._employee(tx, employee_id)
            self._missing_days.process_in(tx, employee, month, year)
            summary = self._store.recalculate_summary(tx, employee_id, month, year)

            holidays = self._store.holiday_dates(tx, start, end)
            past_days = working_days_between(start, today - timedelta(days=1), holidays) if today > start else []
            records = {r.work_date: r for r in self._store.list_range(tx, employee_id, start, end)}
            attended = sum(1 for d in past_days if d in records and records[d].check_in_time is not None)
            absent = sum(1 for d in past_days if d in records and records[d].unpaid_leave)

            balance = self._ledger.current_balance(tx.leave_balances, employee_id, month, year, employee.joining_date)
            requests = tx.leave_requests.list(employee_id=employee_id, start=start, end=end)
            deductions = tx.deductions.list_for_employee(employee_id, start=start, end=end)

            return EmployeeDashboard(
                employee=employee,
                month=month,
                year=year,
                summary=summary,
                working_days=count_working_days(month, year, holidays),
                past_working_days=len(past_days),
                attended_days=attended,
                absent_days=absent,
                leave_balance=balance,
                leave_requests=requests,
                total_deductions=sum_money(d.deducted_amount for d in deductions),
                today=self._today_in(tx, employee_id),
            )
