from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from ..attendance.service import AttendanceService
from ..attendance.store import AttendanceRecordStore
from ..common.datetime_utils import Clock, previous_month
from ..common.working_days import is_working_day
from ..core.exceptions import NotFoundError
from ..database.unit_of_work import UnitOfWork
from .missing_days import MissingDayProcessor

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one run over many employees."""

    processed: int = 0
    skipped: int = 0
    failed: list[int] = field(default_factory=list)


class SchedulerJobs:
    """Entry points for the external scheduler.

    Every employee is handled in its own transaction: a failure is logged and
    the run continues with the next employee. Running a job twice for the
    same day changes nothing the second time.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: Clock,
        attendance: AttendanceService,
        missing_days: MissingDayProcessor,
        store: AttendanceRecordStore,
    ):
        self._uow = uow
        self._clock = clock
        self._attendance = attendance
        self._missing_days = missing_days
        self._store = store

    def run_auto_checkout(self, for_date: Optional[date] = None) -> BatchResult:
        """Close every record of `for_date` (default: yesterday) still checked in."""
        for_date = for_date or self._clock.today() - timedelta(days=1)
        with self._uow.transaction() as tx:
            employee_ids = [r.employee_id for r in tx.attendance.list_for_date(for_date) if r.is_checked_in]

        result = BatchResult()
        for employee_id in employee_ids:
            try:
                if self._attendance.auto_checkout(employee_id, for_date) is None:
                    result.skipped += 1
                else:
                    result.processed += 1
            except Exception:
                logger.exception("Auto checkout failed for employee %s on %s", employee_id, for_date)
                result.failed.append(employee_id)

        logger.info(
            "Auto checkout for %s: processed=%s skipped=%s failed=%s",
            for_date, result.processed, result.skipped, len(result.failed),
        )
        return result

    def run_daily_backfill(self) -> BatchResult:
        """Today's placeholder on working days, then charge the month's missing past days.

        On the first day of a month the previous month is settled too.
        """
        today = self._clock.today()
        months = [(today.month, today.year)]
        if today.day == 1:
            months.insert(0, previous_month(today.month, today.year))

        with self._uow.transaction() as tx:
            employee_ids = [e.employee_id for e in tx.employees.list_active()]
            working_today = is_working_day(today, self._store.holiday_dates(tx, today, today))

        result = BatchResult()
        for employee_id in employee_ids:
            try:
                with self._uow.transaction() as tx:
                    employee = tx.employees.get_by_id(employee_id)
                    if employee is None:
                        raise NotFoundError("Employee not found")
                    if working_today and (employee.joining_date is None or employee.joining_date <= today):
                        self._store.ensure_placeholder(tx, employee_id, today)
                    for month, year in months:
                        self._missing_days.process_in(tx, employee, month, year)
                result.processed += 1
            except Exception:
                logger.exception("Daily backfill failed for employee %s", employee_id)
                result.failed.append(employee_id)

        logger.info("Daily backfill for %s: processed=%s failed=%s", today, result.processed, len(result.failed))
        return result

    def process_missing_days_for_all(self, month: int, year: int) -> BatchResult:
        with self._uow.transaction() as tx:
            employee_ids = [e.employee_id for e in tx.employees.list_active()]

        result = BatchResult()
        for employee_id in employee_ids:
            try:
                outcome = self._missing_days.process_missing_days(employee_id, month, year)
                if outcome.processed_days:
                    result.processed += 1
                else:
                    result.skipped += 1
            except Exception:
                logger.exception("Missing-day processing failed for employee %s (%02d/%s)", employee_id, month, year)
                result.failed.append(employee_id)
        return result
