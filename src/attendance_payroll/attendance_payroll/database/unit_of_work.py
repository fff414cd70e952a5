from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import ContextManager, Iterator, Protocol

from ..attendance.repository import AttendanceRepository
from ..employees.repository import EmployeeRepository
from ..holidays.repository import HolidayRepository
from ..leaves.repository import LeaveBalanceRepository, LeaveRequestRepository
from ..payroll.repository import DeductionLedgerRepository, MonthlySummaryRepository
from .connection import DatabaseConnection
from .mysql_base import db_cursor


@dataclass(frozen=True)
class Repositories:
    """All repositories bound to one transaction."""

    employees: EmployeeRepository
    attendance: AttendanceRepository
    summaries: MonthlySummaryRepository
    deductions: DeductionLedgerRepository
    leave_requests: LeaveRequestRepository
    leave_balances: LeaveBalanceRepository
    holidays: HolidayRepository


class UnitOfWork(Protocol):
    """Opens a transaction: commit when the block exits normally, full rollback otherwise."""

    def transaction(self) -> ContextManager[Repositories]:
        raise NotImplementedError


class MySQLUnitOfWork(UnitOfWork):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[Repositories]:
        # Imported here: the MySQL repositories import this package's helpers.
        from ..attendance.mysql_attendance_repository import MySQLAttendanceRepository
        from ..employees.mysql_employee_repository import MySQLEmployeeRepository
        from ..holidays.mysql_holiday_repository import MySQLHolidayRepository
        from ..leaves.mysql_leave_repository import MySQLLeaveBalanceRepository, MySQLLeaveRequestRepository
        from ..payroll.mysql_payroll_repository import MySQLDeductionLedgerRepository, MySQLMonthlySummaryRepository

        with db_cursor(self._conn_factory) as (_, cur):
            yield Repositories(
                employees=MySQLEmployeeRepository(cur),
                attendance=MySQLAttendanceRepository(cur),
                summaries=MySQLMonthlySummaryRepository(cur),
                deductions=MySQLDeductionLedgerRepository(cur),
                leave_requests=MySQLLeaveRequestRepository(cur),
                leave_balances=MySQLLeaveBalanceRepository(cur),
                holidays=MySQLHolidayRepository(cur),
            )
