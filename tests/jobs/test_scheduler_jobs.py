import logging
from datetime import date

from tests.fakes import at

TODAY = date(2026, 3, 10)


def test_daily_backfill_creates_todays_placeholders_and_charges_the_past(container, uow):
    result = container.scheduler_jobs.run_daily_backfill()
    assert result.processed == 2
    assert result.failed == []

    today = {r.employee_id: r for r in uow.state.attendance.values() if r.work_date == TODAY}
    assert set(today) == {1, 2}
    assert all(r.is_placeholder for r in today.values())
    assert (1, 3, 2026) in uow.state.summaries
    assert not [r for r in uow.state.attendance.values() if r.employee_id == 3]


def test_daily_backfill_is_idempotent(container, uow):
    container.scheduler_jobs.run_daily_backfill()
    snapshot = dict(uow.state.attendance)
    balances = dict(uow.state.leave_balances)

    container.scheduler_jobs.run_daily_backfill()
    assert uow.state.attendance == snapshot
    assert uow.state.leave_balances == balances


def test_first_of_month_settles_the_previous_month(container, uow, clock):
    clock.current = at(date(2026, 4, 1), 6, 0)
    container.scheduler_jobs.run_daily_backfill()

    march = [r for r in uow.state.attendance.values() if r.employee_id == 1 and r.work_date.month == 3]
    assert len(march) == 22
    assert uow.state.summaries[(1, 3, 2026)].total_short_minutes == 20 * 540


def test_failure_of_one_employee_rolls_back_only_that_employee(container, uow, monkeypatch, caplog):
    processor = container.missing_day_processor
    original = processor.process_in

    def flaky(tx, employee, month, year):
        if employee.employee_id == 2:
            raise RuntimeError("deadlock")
        return original(tx, employee, month, year)

    monkeypatch.setattr(processor, "process_in", flaky)
    with caplog.at_level(logging.ERROR):
        result = container.scheduler_jobs.run_daily_backfill()

    assert result.processed == 1
    assert result.failed == [2]
    assert "Daily backfill failed for employee 2" in caplog.text
    assert not [r for r in uow.state.attendance.values() if r.employee_id == 2]


def test_process_missing_days_for_all(container, uow):
    result = container.scheduler_jobs.process_missing_days_for_all(3, 2026)
    assert result.processed == 2
    assert result.skipped == 0

    again = container.scheduler_jobs.process_missing_days_for_all(3, 2026)
    assert again.processed == 0
    assert again.skipped == 2
