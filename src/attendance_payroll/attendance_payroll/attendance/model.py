from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar date.

    Lifecycle: placeholder (inactive, no check-in) -> checked-in ->
    checked-out. Public-holiday and unpaid-leave records are created
    already final and carry no check-in/out unless the day was worked.
    """

    attendance_id: int
    employee_id: int
    work_date: date
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    total_worked_minutes: Optional[int] = None
    short_minutes: Optional[int] = None
    salary_earned: Optional[Decimal] = None
    is_late: bool = False
    is_half_day: bool = False
    is_public_holiday: bool = False
    unpaid_leave: bool = False
    is_active: bool = True
    leave_minutes_applied: int = 0
    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_placeholder(self) -> bool:
        return (
            self.check_in_time is None
            and not self.is_public_holiday
            and not self.unpaid_leave
        )

    @property
    def is_checked_in(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is None

    @property
    def is_checked_out(self) -> bool:
        return self.check_out_time is not None

    @property
    def is_finalized(self) -> bool:
        """Contributes to monthly aggregates (checked out, or an absence record)."""
        return self.is_checked_out or self.unpaid_leave

    def with_changes(self, **changes) -> "AttendanceRecord":
        return replace(self, **changes)


@dataclass(frozen=True)
class NewAttendance:
    """Insert payload for an attendance record (id assigned by the store)."""

    employee_id: int
    work_date: date
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    total_worked_minutes: Optional[int] = None
    short_minutes: Optional[int] = None
    salary_earned: Optional[Decimal] = None
    is_late: bool = False
    is_half_day: bool = False
    is_public_holiday: bool = False
    unpaid_leave: bool = False
    is_active: bool = True
    leave_minutes_applied: int = 0
