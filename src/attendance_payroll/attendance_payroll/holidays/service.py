from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import NewAttendance
from ..attendance.store import AttendanceRecordStore
from ..common.datetime_utils import Clock
from ..common.money import ZERO
from ..common.validators import optional_text, require_non_empty
from ..core.exceptions import NotFoundError
from ..database.unit_of_work import Repositories, UnitOfWork
from ..leaves.ledger import LeaveBalanceLedger
from .model import PublicHoliday

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HolidayStampResult:
    holiday: PublicHoliday
    stamped: int = 0
    failed: list[int] = field(default_factory=list)


class HolidayService:
    """Public holidays and their effect on attendance.

    Creating a holiday overwrites every active employee's record for that
    date with a zero-impact holiday record. Deleting it only clears the flag:
    the overwritten worked values are not restored.
    """

    def __init__(self, uow: UnitOfWork, clock: Clock, ledger: LeaveBalanceLedger, store: AttendanceRecordStore):
        self._uow = uow
        self._clock = clock
        self._ledger = ledger
        self._store = store

    def _stamp(self, tx: Repositories, employee_id: int, day: date) -> None:
        record = tx.attendance.get_for_employee_and_date(employee_id, day, for_update=True)
        if record is None:
            tx.attendance.create(
                NewAttendance(
                    employee_id=employee_id,
                    work_date=day,
                    total_worked_minutes=0,
                    short_minutes=0,
                    salary_earned=ZERO,
                    is_public_holiday=True,
                )
            )
        else:
            if record.leave_minutes_applied:
                self._ledger.release(tx.leave_balances, employee_id, day.month, day.year, record.leave_minutes_applied)
            tx.deductions.delete_for_attendance(record.attendance_id)
            tx.attendance.save(
                record.with_changes(
                    total_worked_minutes=0,
                    short_minutes=0,
                    salary_earned=ZERO,
                    is_late=False,
                    is_half_day=False,
                    is_public_holiday=True,
                    unpaid_leave=False,
                    is_active=True,
                    leave_minutes_applied=0,
                )
            )
        self._store.recalculate_summary(tx, employee_id, day.month, day.year)

    def _unstamp(self, tx: Repositories, employee_id: int, day: date) -> None:
        record = tx.attendance.get_for_employee_and_date(employee_id, day, for_update=True)
        if record is None or not record.is_public_holiday:
            return
        if record.check_in_time is None:
            record = record.with_changes(
                is_public_holiday=False,
                is_active=False,
                total_worked_minutes=None,
                short_minutes=None,
                salary_earned=None,
            )
        else:
            record = record.with_changes(is_public_holiday=False)
        tx.attendance.save(record)
        self._store.recalculate_summary(tx, employee_id, day.month, day.year)

    def create_holiday(self, holiday_date: date, name: str, description: Optional[str] = None) -> HolidayStampResult:
        name = require_non_empty(name, "Holiday name")
        with self._uow.transaction() as tx:
            holiday = tx.holidays.create(holiday_date=holiday_date, name=name, description=optional_text(description))
            employee_ids = [e.employee_id for e in tx.employees.list_active()]

        stamped = 0
        failed: list[int] = []
        for employee_id in employee_ids:
            try:
                with self._uow.transaction() as tx:
                    self._stamp(tx, employee_id, holiday_date)
                stamped += 1
            except Exception:
                logger.exception("Failed to stamp holiday %s for employee %s", holiday_date, employee_id)
                failed.append(employee_id)

        logger.info("Public holiday %s created: stamped=%s failed=%s", holiday_date, stamped, len(failed))
        return HolidayStampResult(holiday=holiday, stamped=stamped, failed=failed)

    def delete_holiday(self, holiday_id: int) -> HolidayStampResult:
        with self._uow.transaction() as tx:
            holiday = tx.holidays.get(holiday_id)
            if holiday is None:
                raise NotFoundError("Public holiday not found")
            tx.holidays.delete(holiday_id)
            employee_ids = [r.employee_id for r in tx.attendance.list_for_date(holiday.holiday_date) if r.is_public_holiday]

        unstamped = 0
        failed: list[int] = []
        for employee_id in employee_ids:
            try:
                with self._uow.transaction() as tx:
                    self._unstamp(tx, employee_id, holiday.holiday_date)
                unstamped += 1
            except Exception:
                logger.exception("Failed to unmark holiday %s for employee %s", holiday.holiday_date, employee_id)
                failed.append(employee_id)

        logger.info("Public holiday %s deleted: unmarked=%s failed=%s", holiday.holiday_date, unstamped, len(failed))
        return HolidayStampResult(holiday=holiday, stamped=unstamped, failed=failed)

    def update_holiday(self, holiday_id: int, *, name: str, description: Optional[str] = None) -> PublicHoliday:
        name = require_non_empty(name, "Holiday name")
        with self._uow.transaction() as tx:
            if tx.holidays.get(holiday_id) is None:
                raise NotFoundError("Public holiday not found")
            tx.holidays.update(holiday_id, name=name, description=optional_text(description))
            return tx.holidays.get(holiday_id)

    def list_holidays(self, year: Optional[int] = None) -> Sequence[PublicHoliday]:
        year = year or self._clock.today().year
        with self._uow.transaction() as tx:
            return tx.holidays.list_between(date(year, 1, 1), date(year, 12, 31))
