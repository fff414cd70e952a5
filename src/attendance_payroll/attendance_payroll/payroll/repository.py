from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import DeductionEntry, MonthlyAttendanceSummary


class MonthlySummaryRepository(Protocol):
    def get(self, employee_id: int, month: int, year: int) -> Optional[MonthlyAttendanceSummary]:
        raise NotImplementedError

    def upsert(self, summary: MonthlyAttendanceSummary) -> None:
        raise NotImplementedError

    def list_for_month(self, month: int, year: int) -> Sequence[MonthlyAttendanceSummary]:
        raise NotImplementedError


class DeductionLedgerRepository(Protocol):
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
        raise NotImplementedError

    def delete_for_attendance(self, attendance_id: int) -> int:
        raise NotImplementedError

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[DeductionEntry]:
        """Entries whose attendance date falls in [start, end], newest first."""

        raise NotImplementedError
