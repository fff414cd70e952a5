from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import PublicHoliday


class HolidayRepository(Protocol):
    def create(self, *, holiday_date: date, name: str, description: Optional[str]) -> PublicHoliday:
        """Insert; ConflictError when the date already has a holiday."""

        raise NotImplementedError

    def get(self, holiday_id: int) -> Optional[PublicHoliday]:
        raise NotImplementedError

    def get_by_date(self, holiday_date: date) -> Optional[PublicHoliday]:
        raise NotImplementedError

    def list_between(self, start: date, end: date) -> Sequence[PublicHoliday]:
        raise NotImplementedError

    def update(self, holiday_id: int, *, name: str, description: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, holiday_id: int) -> bool:
        raise NotImplementedError
