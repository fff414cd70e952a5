"""Working-day calendar: Monday to Friday, minus public holidays."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from .datetime_utils import iter_days, month_bounds
from .money import to_money


def is_working_day(day: date, holidays: Optional[Iterable[date]] = None) -> bool:
    if day.weekday() >= 5:
        return False
    return not holidays or day not in set(holidays)


def working_days(month: int, year: int, holidays: Optional[Iterable[date]] = None) -> list[date]:
    start, end = month_bounds(month, year)
    skip = set(holidays or ())
    return [d for d in iter_days(start, end) if d.weekday() < 5 and d not in skip]


def working_days_between(start: date, end: date, holidays: Optional[Iterable[date]] = None) -> list[date]:
    skip = set(holidays or ())
    return [d for d in iter_days(start, end) if d.weekday() < 5 and d not in skip]


def count_working_days(month: int, year: int, holidays: Optional[Iterable[date]] = None) -> int:
    return len(working_days(month, year, holidays))


def daily_salary_from_monthly(
    monthly_salary: Decimal,
    month: int,
    year: int,
    holidays: Optional[Iterable[date]] = None,
) -> Decimal:
    days = count_working_days(month, year, holidays)
    if days == 0:
        return to_money(0)
    return to_money(Decimal(monthly_salary) / days)
