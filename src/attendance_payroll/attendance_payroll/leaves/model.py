from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveRequest:
    """A request for leave on one date, in multiples of half a day."""

    request_id: int
    employee_id: int
    leave_date: date
    days: Decimal
    requested_minutes: int
    status: LeaveStatus
    reason: Optional[str]
    created_at: datetime
    unpaid_minutes: int = 0
    decided_at: Optional[datetime] = None

    @property
    def hours(self) -> int:
        return round(self.requested_minutes / 60)

    @property
    def unpaid_hours(self) -> int:
        return round(self.unpaid_minutes / 60)


@dataclass(frozen=True)
class LeaveBalance:
    """Per employee-month leave pool, in minutes.

    balance_minutes already includes carryover_minutes once it was pulled
    from the previous month.
    """

    employee_id: int
    month: int
    year: int
    balance_minutes: int
    utilized_minutes: int = 0
    carryover_minutes: int = 0

    @property
    def available_minutes(self) -> int:
        return self.balance_minutes - self.utilized_minutes


@dataclass(frozen=True)
class LeaveUtilization:
    """Outcome of a utilize() call; insufficient balance is not an error."""

    success: bool
    remaining_minutes: int


@dataclass(frozen=True)
class BalanceView:
    balance_minutes: int
    utilized_minutes: int
    available_minutes: int
    carryover_minutes: int


@dataclass(frozen=True)
class LeaveBreakdown:
    requested_minutes: int
    available_minutes: int
    paid_minutes: int
    unpaid_minutes: int
    is_future_month: bool
