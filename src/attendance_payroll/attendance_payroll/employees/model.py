from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as seen by attendance and payroll.

    Note: plain data object (no DB access); the account itself (login,
    role) is owned by the auth service upstream.
    """

    employee_id: int
    full_name: str
    daily_salary: Decimal
    joining_date: Optional[date] = None
    designation: Optional[str] = None
    is_active: bool = True
