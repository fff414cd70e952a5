from __future__ import annotations

from typing import Optional, Sequence

from ..database.mysql_base import as_decimal, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, full_name, daily_salary, joining_date, designation, is_active"


def _to_employee(row) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        full_name=row["full_name"],
        daily_salary=as_decimal(row["daily_salary"]),
        joining_date=row.get("joining_date"),
        designation=row.get("designation"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, cur):
        self._cur = cur

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        self._cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (employee_id,))
        row = fetchone(self._cur)
        return _to_employee(row) if row else None

    def list_active(self) -> Sequence[Employee]:
        self._cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE is_active=1 ORDER BY employee_id")
        return [_to_employee(r) for r in fetchall(self._cur)]

    def list_by_ids(self, employee_ids: Sequence[int]) -> Sequence[Employee]:
        ids = [int(i) for i in employee_ids]
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM employees WHERE employee_id IN ({placeholders}) ORDER BY employee_id",
            tuple(ids),
        )
        return [_to_employee(r) for r in fetchall(self._cur)]
