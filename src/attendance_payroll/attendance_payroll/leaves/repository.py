from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveBalance, LeaveRequest


class LeaveRequestRepository(Protocol):
    def create(
        self,
        *,
        employee_id: int,
        leave_date: date,
        days: Decimal,
        requested_minutes: int,
        reason: Optional[str],
        created_at: datetime,
    ) -> LeaveRequest:
        """Insert a pending request; ConflictError if one exists for that date."""

        raise NotImplementedError

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, leave_date: date) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        unpaid_minutes: int,
        decided_at: datetime,
    ) -> bool:
        """Move a pending request to a final status; False if it was not pending."""

        raise NotImplementedError


class LeaveBalanceRepository(Protocol):
    def get(self, employee_id: int, month: int, year: int, *, for_update: bool = False) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def create_if_absent(self, balance: LeaveBalance) -> bool:
        """Insert unless the (employee, month, year) row exists; True if inserted."""

        raise NotImplementedError

    def save(self, balance: LeaveBalance) -> None:
        raise NotImplementedError
