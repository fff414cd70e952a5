from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.mysql_base import fetchall, fetchone, translate_duplicate
from .model import PublicHoliday
from .repository import HolidayRepository


def _to_holiday(r) -> PublicHoliday:
    return PublicHoliday(
        holiday_id=int(r["holiday_id"]),
        holiday_date=r["holiday_date"],
        name=r["name"],
        description=r.get("description"),
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, cur):
        self._cur = cur

    def create(self, *, holiday_date: date, name: str, description: Optional[str]) -> PublicHoliday:
        with translate_duplicate("A public holiday already exists for this date"):
            self._cur.execute(
                "INSERT INTO public_holidays(holiday_date, name, description) VALUES(%s,%s,%s)",
                (holiday_date, name, description),
            )
        return PublicHoliday(
            holiday_id=int(self._cur.lastrowid),
            holiday_date=holiday_date,
            name=name,
            description=description,
        )

    def get(self, holiday_id: int) -> Optional[PublicHoliday]:
        self._cur.execute(
            "SELECT holiday_id, holiday_date, name, description FROM public_holidays WHERE holiday_id=%s",
            (holiday_id,),
        )
        r = fetchone(self._cur)
        return _to_holiday(r) if r else None

    def get_by_date(self, holiday_date: date) -> Optional[PublicHoliday]:
        self._cur.execute(
            "SELECT holiday_id, holiday_date, name, description FROM public_holidays WHERE holiday_date=%s",
            (holiday_date,),
        )
        r = fetchone(self._cur)
        return _to_holiday(r) if r else None

    def list_between(self, start: date, end: date) -> Sequence[PublicHoliday]:
        self._cur.execute(
            """
            SELECT holiday_id, holiday_date, name, description
            FROM public_holidays
            WHERE holiday_date BETWEEN %s AND %s
            ORDER BY holiday_date
            """,
            (start, end),
        )
        return [_to_holiday(r) for r in fetchall(self._cur)]

    def update(self, holiday_id: int, *, name: str, description: Optional[str]) -> bool:
        self._cur.execute(
            "UPDATE public_holidays SET name=%s, description=%s WHERE holiday_id=%s",
            (name, description, holiday_id),
        )
        return self._cur.rowcount > 0

    def delete(self, holiday_id: int) -> bool:
        self._cur.execute("DELETE FROM public_holidays WHERE holiday_id=%s", (holiday_id,))
        return self._cur.rowcount > 0
