"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Karachi"
DEFAULT_STANDARD_CHECKIN = "12:00"
DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_HALF_DAY_LATE_MINUTES = 60
DEFAULT_MAX_WORKING_MINUTES = 540

MINUTES_PER_WORK_DAY = 9 * 60
HOURS_PER_WORK_DAY = 9
DEFAULT_PAID_LEAVE_DAYS_PER_MONTH = 2
DEFAULT_MAX_CARRYOVER_LEAVE_DAYS = 1
MAX_LEAVE_DAYS_PER_REQUEST = 31

DEFAULT_QR_SUFFIX = "OFFICE_CHECKIN_SYSTEM"
DEFAULT_QR_VALIDITY_MINUTES = 5

DEFAULT_HISTORY_LIMIT = 31
