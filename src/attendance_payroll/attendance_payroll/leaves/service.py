from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_DOWN, Decimal
from typing import Optional, Sequence

from ..attendance.store import AttendanceRecordStore
from ..common.datetime_utils import Clock, month_bounds
from ..common.validators import optional_text, require_decimal
from ..core.constants import MAX_LEAVE_DAYS_PER_REQUEST
from ..core.enums import LeaveStatus
from ..core.exceptions import AccountInactiveError, ConflictError, NotFoundError, StateError, ValidationError
from ..database.unit_of_work import Repositories, UnitOfWork
from ..employees.model import Employee
from .ledger import LeaveBalanceLedger
from .model import BalanceView, LeaveBreakdown, LeaveRequest

logger = logging.getLogger(__name__)

HALF_DAY = Decimal("0.5")


class LeaveService:
    """Leave requests: submit, decide, list.

    Nothing is reserved at request time; the paid/unpaid split is computed
    again at approval, against the balance of the month the leave falls in.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        ledger: LeaveBalanceLedger,
        store: AttendanceRecordStore,
    ):
        self._uow = uow
        self._clock = clock
        self._ledger = ledger
        self._store = store

    @staticmethod
    def _employee(tx: Repositories, employee_id: int) -> Employee:
        employee = tx.employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _to_days(self, amount, *, in_hours: bool) -> Decimal:
        value = require_decimal(amount, "Leave amount")
        if in_hours:
            hours_per_day = Decimal(self._ledger.policy.minutes_per_work_day) / 60
            value = value / hours_per_day
        if value < HALF_DAY or value > MAX_LEAVE_DAYS_PER_REQUEST:
            raise ValidationError(f"Leave must be between 0.5 and {MAX_LEAVE_DAYS_PER_REQUEST} days")
        if (value / HALF_DAY) % 1 != 0:
            raise ValidationError("Leave must be in multiples of 0.5 day (e.g. 0.5, 1, 1.5, 2)")
        return value.quantize(Decimal("0.1"))

    def _requested_minutes(self, days: Decimal) -> int:
        minutes = days * self._ledger.policy.minutes_per_work_day
        return int(minutes.to_integral_value(rounding=ROUND_DOWN))

    def _is_future_month(self, day: date) -> bool:
        today = self._clock.today()
        return (day.year, day.month) > (today.year, today.month)

    def _available_for(self, tx: Repositories, employee: Employee, day: date, *, read_only: bool) -> int:
        if read_only and self._is_future_month(day):
            # A future month is judged on its own fresh grant, without creating it.
            balance = tx.leave_balances.get(employee.employee_id, day.month, day.year)
            if balance is None:
                return self._ledger.policy.monthly_grant_minutes
            return max(0, balance.available_minutes)
        return self._ledger.available_minutes(
            tx.leave_balances, employee.employee_id, day.month, day.year, employee.joining_date
        )

    def _breakdown(self, requested: int, available: int, day: date) -> LeaveBreakdown:
        paid = min(requested, max(0, available))
        return LeaveBreakdown(
            requested_minutes=requested,
            available_minutes=max(0, available),
            paid_minutes=paid,
            unpaid_minutes=requested - paid,
            is_future_month=self._is_future_month(day),
        )

    def request_leave(
        self,
        employee_id: int,
        leave_date: date,
        amount,
        reason: Optional[str] = None,
        *,
        in_hours: bool = False,
    ) -> tuple[LeaveRequest, LeaveBreakdown]:
        days = self._to_days(amount, in_hours=in_hours)
        if leave_date < self._clock.today():
            raise ValidationError("Leave can only be requested for today or future dates")
        requested = self._requested_minutes(days)

        with self._uow.transaction() as tx:
            employee = self._employee(tx, employee_id)
            if not employee.is_active:
                raise AccountInactiveError("Employee account is inactive")
            if tx.leave_requests.get_for_employee_and_date(employee_id, leave_date):
                raise ConflictError("Leave request already exists for this date")
            attendance = tx.attendance.get_for_employee_and_date(employee_id, leave_date)
            if attendance is not None and not attendance.is_placeholder:
                raise ConflictError("Attendance already exists for this date. Cannot request leave.")

            breakdown = self._breakdown(requested, self._available_for(tx, employee, leave_date, read_only=True), leave_date)
            request = tx.leave_requests.create(
                employee_id=employee_id,
                leave_date=leave_date,
                days=days,
                requested_minutes=requested,
                reason=optional_text(reason),
                created_at=self._clock.now(),
            )

        logger.info(
            "Leave requested by employee %s for %s: %s days (paid=%s unpaid=%s)",
            employee_id, leave_date, days, breakdown.paid_minutes, breakdown.unpaid_minutes,
        )
        return request, breakdown

    def _pending(self, tx: Repositories, request_id: int) -> LeaveRequest:
        request = tx.leave_requests.get(request_id, for_update=True)
        if request is None:
            raise NotFoundError("Leave request not found")
        if request.status != LeaveStatus.PENDING:
            raise StateError(f"Leave request has already been {request.status.value}")
        return request

    def approve_leave(self, request_id: int) -> tuple[LeaveRequest, LeaveBreakdown]:
        now = self._clock.now()
        with self._uow.transaction() as tx:
            request = self._pending(tx, request_id)
            employee = self._employee(tx, request.employee_id)
            day = request.leave_date

            breakdown = self._breakdown(
                request.requested_minutes,
                self._available_for(tx, employee, day, read_only=False),
                day,
            )

            existing = None
            if breakdown.unpaid_minutes:
                existing = tx.attendance.get_for_employee_and_date(employee.employee_id, day, for_update=True)
                if existing is not None and not existing.is_placeholder:
                    raise ConflictError("Attendance already exists for this date")

            paid = breakdown.paid_minutes
            if paid:
                used = self._ledger.utilize(tx.leave_balances, employee.employee_id, day.month, day.year, paid)
                if not used.success:
                    raise StateError("Leave balance changed while approving; please retry")

            if breakdown.unpaid_minutes:
                self._store.write_absence(
                    tx,
                    employee.employee_id,
                    day,
                    short_minutes=breakdown.unpaid_minutes,
                    existing=existing,
                )
                self._store.recalculate_summary(tx, employee.employee_id, day.month, day.year)

            tx.leave_requests.decide(
                request_id=request_id,
                status=LeaveStatus.APPROVED,
                unpaid_minutes=breakdown.unpaid_minutes,
                decided_at=now,
            )
            approved = tx.leave_requests.get(request_id)

        logger.info(
            "Leave request %s approved: paid=%s unpaid=%s",
            request_id, breakdown.paid_minutes, breakdown.unpaid_minutes,
        )
        return approved, breakdown

    def reject_leave(self, request_id: int) -> LeaveRequest:
        with self._uow.transaction() as tx:
            self._pending(tx, request_id)
            tx.leave_requests.decide(
                request_id=request_id,
                status=LeaveStatus.REJECTED,
                unpaid_minutes=0,
                decided_at=self._clock.now(),
            )
            rejected = tx.leave_requests.get(request_id)
        logger.info("Leave request %s rejected", request_id)
        return rejected

    def list_my_requests(
        self,
        employee_id: int,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        start = end = None
        if month is not None or year is not None:
            today = self._clock.today()
            start, end = month_bounds(month or today.month, year or today.year)
        with self._uow.transaction() as tx:
            self._employee(tx, employee_id)
            return tx.leave_requests.list(employee_id=employee_id, start=start, end=end)

    def list_requests(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        with self._uow.transaction() as tx:
            return tx.leave_requests.list(status=status, employee_id=employee_id, limit=limit)

    def current_balance(
        self,
        employee_id: int,
        *,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> BalanceView:
        today = self._clock.today()
        month = month or today.month
        year = year or today.year
        month_bounds(month, year)
        with self._uow.transaction() as tx:
            employee = self._employee(tx, employee_id)
            return self._ledger.current_balance(tx.leave_balances, employee_id, month, year, employee.joining_date)
