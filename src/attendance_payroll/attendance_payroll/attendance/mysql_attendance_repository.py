from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..database.mysql_base import (
    as_decimal,
    as_optional_int,
    fetchall,
    fetchone,
    lock_clause,
    translate_duplicate,
)
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, check_in_time, check_out_time,
    total_worked_minutes, short_minutes, salary_earned, is_late, is_half_day,
    is_public_holiday, unpaid_leave, is_active, leave_minutes_applied, deleted_at
"""


def _to_record(r) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in_time=from_utc_naive(r.get("check_in_time")),
        check_out_time=from_utc_naive(r.get("check_out_time")),
        total_worked_minutes=as_optional_int(r.get("total_worked_minutes")),
        short_minutes=as_optional_int(r.get("short_minutes")),
        salary_earned=as_decimal(r.get("salary_earned")),
        is_late=bool(r["is_late"]),
        is_half_day=bool(r["is_half_day"]),
        is_public_holiday=bool(r["is_public_holiday"]),
        unpaid_leave=bool(r["unpaid_leave"]),
        is_active=bool(r["is_active"]),
        leave_minutes_applied=int(r.get("leave_minutes_applied") or 0),
        deleted_at=from_utc_naive(r.get("deleted_at")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, cur):
        self._cur = cur

    def get(self, attendance_id: int, *, for_update: bool = False) -> Optional[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM attendance_records
            WHERE attendance_id=%s AND deleted_at IS NULL
            """ + lock_clause(for_update),
            (attendance_id,),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def get_for_employee_and_date(
        self,
        employee_id: int,
        work_date: date,
        *,
        for_update: bool = False,
    ) -> Optional[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM attendance_records
            WHERE employee_id=%s AND work_date=%s AND deleted_at IS NULL
            """ + lock_clause(for_update),
            (employee_id, work_date),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND deleted_at IS NULL"
        params: list = [employee_id]
        if start is not None:
            sql += " AND work_date >= %s"
            params.append(start)
        if end is not None:
            sql += " AND work_date <= %s"
            params.append(end)
        sql += " ORDER BY work_date DESC"
        self._cur.execute(sql, tuple(params))
        return [_to_record(r) for r in fetchall(self._cur)]

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM attendance_records
            WHERE work_date=%s AND deleted_at IS NULL
            ORDER BY employee_id
            """,
            (work_date,),
        )
        return [_to_record(r) for r in fetchall(self._cur)]

    def create(self, new: NewAttendance) -> AttendanceRecord:
        with translate_duplicate("Attendance record already exists for this date"):
            self._cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date, check_in_time, check_out_time,
                    total_worked_minutes, short_minutes, salary_earned, is_late, is_half_day,
                    is_public_holiday, unpaid_leave, is_active, leave_minutes_applied
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    new.employee_id,
                    new.work_date,
                    to_utc_naive(new.check_in_time),
                    to_utc_naive(new.check_out_time),
                    new.total_worked_minutes,
                    new.short_minutes,
                    new.salary_earned,
                    int(new.is_late),
                    int(new.is_half_day),
                    int(new.is_public_holiday),
                    int(new.unpaid_leave),
                    int(new.is_active),
                    int(new.leave_minutes_applied),
                ),
            )
        return AttendanceRecord(
            attendance_id=int(self._cur.lastrowid),
            employee_id=new.employee_id,
            work_date=new.work_date,
            check_in_time=new.check_in_time,
            check_out_time=new.check_out_time,
            total_worked_minutes=new.total_worked_minutes,
            short_minutes=new.short_minutes,
            salary_earned=new.salary_earned,
            is_late=new.is_late,
            is_half_day=new.is_half_day,
            is_public_holiday=new.is_public_holiday,
            unpaid_leave=new.unpaid_leave,
            is_active=new.is_active,
            leave_minutes_applied=new.leave_minutes_applied,
        )

    def save(self, record: AttendanceRecord) -> None:
        self._cur.execute(
            """
            UPDATE attendance_records
            SET check_in_time=%s, check_out_time=%s, total_worked_minutes=%s, short_minutes=%s,
                salary_earned=%s, is_late=%s, is_half_day=%s, is_public_holiday=%s,
                unpaid_leave=%s, is_active=%s, leave_minutes_applied=%s
            WHERE attendance_id=%s AND deleted_at IS NULL
            """,
            (
                to_utc_naive(record.check_in_time),
                to_utc_naive(record.check_out_time),
                record.total_worked_minutes,
                record.short_minutes,
                record.salary_earned,
                int(record.is_late),
                int(record.is_half_day),
                int(record.is_public_holiday),
                int(record.unpaid_leave),
                int(record.is_active),
                int(record.leave_minutes_applied),
                record.attendance_id,
            ),
        )

    def soft_delete(self, attendance_id: int, *, deleted_at: datetime) -> bool:
        self._cur.execute(
            "UPDATE attendance_records SET deleted_at=%s WHERE attendance_id=%s AND deleted_at IS NULL",
            (to_utc_naive(deleted_at), attendance_id),
        )
        return self._cur.rowcount > 0
