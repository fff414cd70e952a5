from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.attendance_payroll.attendance_payroll.common.datetime_utils import FixedClock
from src.attendance_payroll.attendance_payroll.container import build_container
from src.attendance_payroll.attendance_payroll.employees.model import Employee
from tests.fakes import QR_SUFFIX, TZ, InMemoryUnitOfWork, State, at


@pytest.fixture
def fixed_now():
    # Tuesday, mid-afternoon.
    return at(date(2026, 3, 10), 15, 0)


@pytest.fixture
def clock(fixed_now):
    return FixedClock(current=fixed_now, tz=TZ)


@pytest.fixture
def uow():
    state = State()
    state.employees = {
        1: Employee(employee_id=1, full_name="Ayesha Khan", daily_salary=Decimal("1000.00"), joining_date=date(2025, 1, 15)),
        2: Employee(employee_id=2, full_name="Bilal Ahmed", daily_salary=Decimal("1500.00"), joining_date=date(2024, 6, 1)),
        3: Employee(
            employee_id=3,
            full_name="Former Employee",
            daily_salary=Decimal("800.00"),
            joining_date=date(2023, 1, 1),
            is_active=False,
        ),
    }
    state.next_id = 100
    return InMemoryUnitOfWork(state)


@pytest.fixture
def container(uow, clock):
    return build_container(
        uow=uow,
        clock=clock,
        attendance={
            "STANDARD_CHECKIN_TIME": "12:00",
            "LATE_THRESHOLD_MINUTES": 15,
            "HALF_DAY_LATE_MINUTES": 60,
            "MAX_WORKING_MINUTES": 540,
            "PAID_LEAVES_PER_MONTH_DAYS": 2,
            "MAX_CARRYOVER_LEAVE_DAYS": 1,
            "MINUTES_PER_WORK_DAY": 540,
        },
        qr_token=QR_SUFFIX,
        qr_validity_minutes=5,
    )


@pytest.fixture
def token(container):
    def make(moment: datetime) -> str:
        return container.qr_codec.generate(moment)

    return make
