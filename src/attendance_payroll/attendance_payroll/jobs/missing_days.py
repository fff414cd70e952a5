from __future__ import annotations

import logging
from dataclasses import dataclass

from ..attendance.rules import AttendanceRules
from ..attendance.store import AttendanceRecordStore
from ..common.datetime_utils import Clock, month_bounds
from ..core.enums import LeaveStatus
from ..core.exceptions import NotFoundError
from ..database.unit_of_work import Repositories, UnitOfWork
from ..employees.model import Employee
from ..leaves.ledger import LeaveBalanceLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MissingDaysResult:
    processed_days: int = 0
    leave_deducted: int = 0
    short_minutes_added: int = 0


class MissingDayProcessor:
    """Charges past working days that have no attendance.

    Each missing day is covered from the leave balance first; whatever leave
    cannot cover becomes short minutes on an unpaid-leave record. Days are
    handled in date order because each one sees the balance left by the
    previous ones. Approved leave dates and days before the joining date are
    never charged.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        rules: AttendanceRules,
        ledger: LeaveBalanceLedger,
        store: AttendanceRecordStore,
    ):
        self._uow = uow
        self._clock = clock
        self._rules = rules
        self._ledger = ledger
        self._store = store

    def process_missing_days(self, employee_id: int, month: int, year: int) -> MissingDaysResult:
        with self._uow.transaction() as tx:
            employee = tx.employees.get_by_id(employee_id)
            if not employee:
                raise NotFoundError("Employee not found")
            return self.process_in(tx, employee, month, year)

    def process_in(self, tx: Repositories, employee: Employee, month: int, year: int) -> MissingDaysResult:
        start, end = month_bounds(month, year)
        if employee.joining_date and employee.joining_date > start:
            start = employee.joining_date
        if start > end:
            return MissingDaysResult()

        approved = {
            r.leave_date
            for r in tx.leave_requests.list(
                status=LeaveStatus.APPROVED,
                employee_id=employee.employee_id,
                start=start,
                end=end,
            )
        }
        missing = self._store.missing_days(
            tx,
            employee.employee_id,
            start,
            end,
            today=self._clock.today(),
            skip=approved,
        )
        if not missing:
            return MissingDaysResult()

        required = self._rules.required_minutes(False)
        leave_deducted = 0
        short_added = 0
        for day, existing in missing:
            available = self._ledger.available_minutes(
                tx.leave_balances, employee.employee_id, month, year, employee.joining_date
            )
            paid = min(required, available)
            if paid:
                used = self._ledger.utilize(tx.leave_balances, employee.employee_id, month, year, paid)
                if not used.success:
                    paid = 0
            short = required - paid
            self._store.write_absence(
                tx,
                employee.employee_id,
                day,
                short_minutes=short,
                leave_minutes_applied=paid,
                existing=existing,
            )
            leave_deducted += paid
            short_added += short

        self._store.recalculate_summary(tx, employee.employee_id, month, year)
        logger.info(
            "Missing days for employee %s in %02d/%s: days=%s leave=%s short=%s",
            employee.employee_id, month, year, len(missing), leave_deducted, short_added,
        )
        return MissingDaysResult(
            processed_days=len(missing),
            leave_deducted=leave_deducted,
            short_minutes_added=short_added,
        )
