from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Optional

from ..common.datetime_utils import Clock, previous_month
from ..core.constants import (
    DEFAULT_MAX_CARRYOVER_LEAVE_DAYS,
    DEFAULT_PAID_LEAVE_DAYS_PER_MONTH,
    MINUTES_PER_WORK_DAY,
)
from ..core.exceptions import ValidationError
from .model import BalanceView, LeaveBalance, LeaveUtilization
from .repository import LeaveBalanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeavePolicy:
    paid_days_per_month: int = DEFAULT_PAID_LEAVE_DAYS_PER_MONTH
    max_carryover_days: int = DEFAULT_MAX_CARRYOVER_LEAVE_DAYS
    minutes_per_work_day: int = MINUTES_PER_WORK_DAY

    @property
    def monthly_grant_minutes(self) -> int:
        return self.paid_days_per_month * self.minutes_per_work_day

    @property
    def max_carryover_minutes(self) -> int:
        return self.max_carryover_days * self.minutes_per_work_day


class LeaveBalanceLedger:
    """Per employee-month leave pool.

    Every method works on the balances repository of the caller's unit of
    work, and every read that may lead to a write takes the row lock, so
    concurrent utilize() calls on one employee-month are serialised by the
    store. Carryover is folded in on the first read once the month has
    started.
    """

    def __init__(self, policy: LeavePolicy, clock: Optional[Clock] = None):
        self.policy = policy
        self._clock = clock

    def _month_started(self, month: int, year: int) -> bool:
        if self._clock is None:
            return True
        today = self._clock.today()
        return (year, month) <= (today.year, today.month)

    def get_or_create(
        self,
        balances: LeaveBalanceRepository,
        employee_id: int,
        month: int,
        year: int,
        joining_date: Optional[date] = None,
    ) -> LeaveBalance:
        # joining_date is accepted for callers; the full grant applies in the joining month too.
        balance = balances.get(employee_id, month, year, for_update=True)
        if balance is None:
            balances.create_if_absent(
                LeaveBalance(
                    employee_id=employee_id,
                    month=month,
                    year=year,
                    balance_minutes=self.policy.monthly_grant_minutes,
                )
            )
            balance = balances.get(employee_id, month, year, for_update=True)

        if balance.carryover_minutes == 0 and self._month_started(month, year):
            carry = self.carryover_from(balances, employee_id, month, year)
            if carry > 0:
                balance = replace(balance, balance_minutes=balance.balance_minutes + carry, carryover_minutes=carry)
                balances.save(balance)
                logger.info(
                    "Carried over %s leave minutes for employee %s into %02d/%s",
                    carry, employee_id, month, year,
                )
        return balance

    def carryover_from(self, balances: LeaveBalanceRepository, employee_id: int, month: int, year: int) -> int:
        """Unused minutes of the month before (month, year), capped."""
        prev_month, prev_year = previous_month(month, year)
        prior = balances.get(employee_id, prev_month, prev_year)
        if prior is None:
            return 0
        unused = max(0, prior.balance_minutes - prior.utilized_minutes)
        return min(unused, self.policy.max_carryover_minutes)

    def utilize(
        self,
        balances: LeaveBalanceRepository,
        employee_id: int,
        month: int,
        year: int,
        minutes: int,
    ) -> LeaveUtilization:
        if minutes < 0:
            raise ValidationError("Leave minutes must not be negative")
        balance = self.get_or_create(balances, employee_id, month, year)
        available = balance.available_minutes
        if available < minutes:
            return LeaveUtilization(success=False, remaining_minutes=max(0, available))
        if minutes == 0:
            return LeaveUtilization(success=True, remaining_minutes=max(0, available))

        balances.save(replace(balance, utilized_minutes=balance.utilized_minutes + minutes))
        return LeaveUtilization(success=True, remaining_minutes=available - minutes)

    def release(
        self,
        balances: LeaveBalanceRepository,
        employee_id: int,
        month: int,
        year: int,
        minutes: int,
    ) -> int:
        """Give back previously utilized minutes; returns the minutes actually released."""
        if minutes <= 0:
            return 0
        balance = self.get_or_create(balances, employee_id, month, year)
        released = min(minutes, balance.utilized_minutes)
        if released:
            balances.save(replace(balance, utilized_minutes=balance.utilized_minutes - released))
        return released

    def available_minutes(
        self,
        balances: LeaveBalanceRepository,
        employee_id: int,
        month: int,
        year: int,
        joining_date: Optional[date] = None,
    ) -> int:
        return max(0, self.get_or_create(balances, employee_id, month, year, joining_date).available_minutes)

    def current_balance(
        self,
        balances: LeaveBalanceRepository,
        employee_id: int,
        month: int,
        year: int,
        joining_date: Optional[date] = None,
    ) -> BalanceView:
        balance = self.get_or_create(balances, employee_id, month, year, joining_date)
        return BalanceView(
            balance_minutes=balance.balance_minutes,
            utilized_minutes=balance.utilized_minutes,
            available_minutes=max(0, balance.available_minutes),
            carryover_minutes=balance.carryover_minutes,
        )
