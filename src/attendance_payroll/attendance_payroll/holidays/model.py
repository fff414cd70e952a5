from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class PublicHoliday:
    holiday_id: int
    holiday_date: date
    name: str
    description: Optional[str] = None
