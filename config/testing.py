import os

from .config import ATTENDANCE, QR_TOKEN, QR_VALIDITY_MINUTES, db_config

SECRET_KEY = "test-secret"

DB_CONFIG = db_config(default_password="test")
DB_CONFIG["database"] = os.getenv("DB_NAME", "attendance_payroll_test")

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
