from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendance


class AttendanceRepository(Protocol):
    """Attendance records; every read skips soft-deleted rows.

    `for_update=True` takes a row lock held until the unit of work ends.
    """

    def get(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(
        self,
        employee_id: int,
        work_date: date,
        *,
        for_update: bool = False,
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(self, new: NewAttendance) -> AttendanceRecord:
        """Insert; raises ConflictError when (employee, date) already has a live record."""

        raise NotImplementedError

    def save(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def soft_delete(self, attendance_id: int, *, deleted_at: datetime) -> bool:
        raise NotImplementedError
