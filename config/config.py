"""Settings shared by every environment."""

import os


def _int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


def db_config(default_password: str = "") -> dict:
    return {
        "host": os.environ.get("DB_HOST", "localhost"),
        "port": _int("DB_PORT", 3306),
        "user": os.environ.get("DB_USER", "root"),
        "password": os.environ.get("DB_PASSWORD", default_password),
        "database": os.environ.get("DB_NAME", "attendance_payroll_db"),
    }


# Suffix appended to the ISO timestamp encoded in check-in/check-out QR codes.
QR_TOKEN = os.environ.get("QR_TOKEN", "OFFICE_CHECKIN_SYSTEM")
QR_VALIDITY_MINUTES = _int("QR_VALIDITY_MINUTES", 5)

ATTENDANCE = {
    "TIMEZONE": os.environ.get("ORG_TIMEZONE", "Asia/Karachi"),
    "STANDARD_CHECKIN_TIME": os.environ.get("STANDARD_CHECKIN_TIME", "12:00"),
    "LATE_THRESHOLD_MINUTES": _int("LATE_THRESHOLD_MINUTES", 15),
    "HALF_DAY_LATE_MINUTES": _int("HALF_DAY_LATE_MINUTES", 60),
    "MAX_WORKING_MINUTES": _int("MAX_WORKING_MINUTES", 540),
    "PAID_LEAVES_PER_MONTH_DAYS": _int("PAID_LEAVES_PER_MONTH", 2),
    "MAX_CARRYOVER_LEAVE_DAYS": _int("MAX_CARRYOVER_LEAVES", 1),
    "MINUTES_PER_WORK_DAY": _int("MINUTES_PER_WORK_DAY", 540),
}
