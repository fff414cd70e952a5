from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from ..core.constants import (
    DEFAULT_HALF_DAY_LATE_MINUTES,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    DEFAULT_MAX_WORKING_MINUTES,
)


@dataclass(frozen=True)
class AttendanceRulesConfig:
    standard_checkin: time
    late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES
    half_day_threshold_minutes: int = DEFAULT_HALF_DAY_LATE_MINUTES
    max_working_minutes: int = DEFAULT_MAX_WORKING_MINUTES


@dataclass(frozen=True)
class WorkingWindow:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Classification:
    is_late: bool
    is_half_day: bool


class AttendanceRules:
    """Standard daily window and the late/half-day classification.

    All instants may be given in any timezone; the window itself is anchored
    to the organisation timezone. The half-day threshold is expected to be at
    least the late threshold but this is not enforced.
    """

    def __init__(self, config: AttendanceRulesConfig, tz: ZoneInfo):
        self.config = config
        self.tz = tz

    def standard_window_for(self, day: date) -> WorkingWindow:
        start = datetime.combine(day, self.config.standard_checkin, tzinfo=self.tz)
        return WorkingWindow(start=start, end=start + timedelta(minutes=self.config.max_working_minutes))

    def classify(self, check_in: datetime, day: date) -> Classification:
        window = self.standard_window_for(day)
        late_after = window.start + timedelta(minutes=self.config.late_threshold_minutes)
        half_day_after = window.start + timedelta(minutes=self.config.half_day_threshold_minutes)
        return Classification(is_late=check_in > late_after, is_half_day=check_in > half_day_after)

    def working_minutes(self, check_in: datetime, check_out: datetime, day: date) -> int:
        """Whole minutes of [check_in, check_out] that fall inside the day's window."""
        window = self.standard_window_for(day)
        start = max(check_in, window.start)
        end = min(check_out, window.end)
        if end <= start:
            return 0
        return int((end - start).total_seconds() // 60)

    def required_minutes(self, is_half_day: bool) -> int:
        if is_half_day:
            return self.config.max_working_minutes // 2
        return self.config.max_working_minutes
