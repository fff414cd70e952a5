from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import LeaveStatus
from ..database.mysql_base import as_decimal, as_int, fetchall, fetchone, lock_clause, translate_duplicate
from .model import LeaveBalance, LeaveRequest
from .repository import LeaveBalanceRepository, LeaveRequestRepository

_REQUEST_COLUMNS = """
    request_id, employee_id, leave_date, days, requested_minutes, unpaid_minutes,
    status, reason, created_at, decided_at
"""


def _to_request(r) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_date=r["leave_date"],
        days=as_decimal(r["days"]),
        requested_minutes=int(r["requested_minutes"]),
        status=LeaveStatus(r["status"]),
        reason=r.get("reason"),
        created_at=from_utc_naive(r["created_at"]),
        unpaid_minutes=as_int(r.get("unpaid_minutes")),
        decided_at=from_utc_naive(r.get("decided_at")),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, cur):
        self._cur = cur

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
        with translate_duplicate("A leave request already exists for this date"):
            self._cur.execute(
                """
                INSERT INTO leave_requests(employee_id, leave_date, days, requested_minutes, status, reason, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee_id,
                    leave_date,
                    days,
                    requested_minutes,
                    LeaveStatus.PENDING.value,
                    reason,
                    to_utc_naive(created_at),
                ),
            )
        return LeaveRequest(
            request_id=int(self._cur.lastrowid),
            employee_id=employee_id,
            leave_date=leave_date,
            days=days,
            requested_minutes=requested_minutes,
            status=LeaveStatus.PENDING,
            reason=reason,
            created_at=created_at,
        )

    def get(self, request_id: int, *, for_update: bool = False) -> Optional[LeaveRequest]:
        self._cur.execute(
            f"SELECT {_REQUEST_COLUMNS} FROM leave_requests WHERE request_id=%s" + lock_clause(for_update),
            (request_id,),
        )
        r = fetchone(self._cur)
        return _to_request(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, leave_date: date) -> Optional[LeaveRequest]:
        self._cur.execute(
            f"SELECT {_REQUEST_COLUMNS} FROM leave_requests WHERE employee_id=%s AND leave_date=%s",
            (employee_id, leave_date),
        )
        r = fetchone(self._cur)
        return _to_request(r) if r else None

    def list(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        sql = f"SELECT {_REQUEST_COLUMNS} FROM leave_requests WHERE 1=1"
        params: list = []
        if status is not None:
            sql += " AND status=%s"
            params.append(status.value)
        if employee_id is not None:
            sql += " AND employee_id=%s"
            params.append(employee_id)
        if start is not None:
            sql += " AND leave_date >= %s"
            params.append(start)
        if end is not None:
            sql += " AND leave_date <= %s"
            params.append(end)
        sql += " ORDER BY leave_date DESC, request_id DESC LIMIT %s"
        params.append(int(limit))
        self._cur.execute(sql, tuple(params))
        return [_to_request(r) for r in fetchall(self._cur)]

    def decide(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        unpaid_minutes: int,
        decided_at: datetime,
    ) -> bool:
        self._cur.execute(
            """
            UPDATE leave_requests
            SET status=%s, unpaid_minutes=%s, decided_at=%s
            WHERE request_id=%s AND status=%s
            """,
            (status.value, unpaid_minutes, to_utc_naive(decided_at), request_id, LeaveStatus.PENDING.value),
        )
        return self._cur.rowcount > 0


def _to_balance(r) -> LeaveBalance:
    return LeaveBalance(
        employee_id=int(r["employee_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        balance_minutes=int(r["balance_minutes"]),
        utilized_minutes=as_int(r.get("utilized_minutes")),
        carryover_minutes=as_int(r.get("carryover_minutes")),
    )


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, cur):
        self._cur = cur

    def get(self, employee_id: int, month: int, year: int, *, for_update: bool = False) -> Optional[LeaveBalance]:
        self._cur.execute(
            """
            SELECT employee_id, month, year, balance_minutes, utilized_minutes, carryover_minutes
            FROM leave_balances
            WHERE employee_id=%s AND month=%s AND year=%s
            """ + lock_clause(for_update),
            (employee_id, month, year),
        )
        r = fetchone(self._cur)
        return _to_balance(r) if r else None

    def create_if_absent(self, balance: LeaveBalance) -> bool:
        # No-op update on conflict: concurrent creators converge on one row.
        self._cur.execute(
            """
            INSERT INTO leave_balances(employee_id, month, year, balance_minutes, utilized_minutes, carryover_minutes)
            VALUES(%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE balance_id=balance_id
            """,
            (
                balance.employee_id,
                balance.month,
                balance.year,
                balance.balance_minutes,
                balance.utilized_minutes,
                balance.carryover_minutes,
            ),
        )
        return self._cur.rowcount == 1

    def save(self, balance: LeaveBalance) -> None:
        self._cur.execute(
            """
            UPDATE leave_balances
            SET balance_minutes=%s, utilized_minutes=%s, carryover_minutes=%s
            WHERE employee_id=%s AND month=%s AND year=%s
            """,
            (
                balance.balance_minutes,
                balance.utilized_minutes,
                balance.carryover_minutes,
                balance.employee_id,
                balance.month,
                balance.year,
            ),
        )
