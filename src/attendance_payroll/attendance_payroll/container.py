from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.rules import AttendanceRules, AttendanceRulesConfig
from .attendance.service import AttendanceService
from .attendance.store import AttendanceRecordStore
from .common.datetime_utils import Clock, SystemClock, load_timezone, parse_hhmm
from .common.qr_token import QRTokenCodec, QRTokenPolicy
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .database.unit_of_work import MySQLUnitOfWork, UnitOfWork
from .holidays.service import HolidayService
from .jobs.missing_days import MissingDayProcessor
from .jobs.scheduler import SchedulerJobs
from .leaves.ledger import LeaveBalanceLedger, LeavePolicy
from .leaves.service import LeaveService
from .payroll.calculator.base import PayrollCalculator
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.service import PayrollReportService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    uow: UnitOfWork
    clock: Clock

    rules: AttendanceRules
    calculator: PayrollCalculator
    ledger: LeaveBalanceLedger
    store: AttendanceRecordStore
    qr_codec: QRTokenCodec

    attendance_service: AttendanceService
    leave_service: LeaveService
    holiday_service: HolidayService
    payroll_report_service: PayrollReportService
    missing_day_processor: MissingDayProcessor
    scheduler_jobs: SchedulerJobs


def rules_config_from(attendance: dict) -> AttendanceRulesConfig:
    return AttendanceRulesConfig(
        standard_checkin=parse_hhmm(str(attendance.get("STANDARD_CHECKIN_TIME", constants.DEFAULT_STANDARD_CHECKIN))),
        late_threshold_minutes=int(attendance.get("LATE_THRESHOLD_MINUTES", constants.DEFAULT_LATE_THRESHOLD_MINUTES)),
        half_day_threshold_minutes=int(attendance.get("HALF_DAY_LATE_MINUTES", constants.DEFAULT_HALF_DAY_LATE_MINUTES)),
        max_working_minutes=int(attendance.get("MAX_WORKING_MINUTES", constants.DEFAULT_MAX_WORKING_MINUTES)),
    )


def leave_policy_from(attendance: dict) -> LeavePolicy:
    return LeavePolicy(
        paid_days_per_month=int(attendance.get("PAID_LEAVES_PER_MONTH_DAYS", constants.DEFAULT_PAID_LEAVE_DAYS_PER_MONTH)),
        max_carryover_days=int(attendance.get("MAX_CARRYOVER_LEAVE_DAYS", constants.DEFAULT_MAX_CARRYOVER_LEAVE_DAYS)),
        minutes_per_work_day=int(attendance.get("MINUTES_PER_WORK_DAY", constants.MINUTES_PER_WORK_DAY)),
    )


def build_container(
    *,
    db_config: Optional[dict] = None,
    attendance: Optional[dict] = None,
    qr_token: str = constants.DEFAULT_QR_SUFFIX,
    qr_validity_minutes: int = constants.DEFAULT_QR_VALIDITY_MINUTES,
    uow: Optional[UnitOfWork] = None,
    clock: Optional[Clock] = None,
) -> Container:
    """Wire every service. `uow` and `clock` replace MySQL and the system clock (tests)."""
    attendance = dict(attendance or {})
    tz = clock.tz if clock is not None else load_timezone(str(attendance.get("TIMEZONE", constants.DEFAULT_TIMEZONE)))
    clock = clock or SystemClock(tz)

    conn = None
    if uow is None:
        if db_config is None:
            raise ValueError("db_config is required without an explicit unit of work")
        config = DBConfig(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
        )
        conn = DatabaseConnection.get_instance(config)
        uow = MySQLUnitOfWork(conn)

    rules = AttendanceRules(rules_config_from(attendance), tz)
    calculator = StandardPayrollCalculator(rules)
    ledger = LeaveBalanceLedger(leave_policy_from(attendance), clock)
    store = AttendanceRecordStore()
    qr_codec = QRTokenCodec(QRTokenPolicy(suffix=qr_token, validity_minutes=int(qr_validity_minutes)))

    missing_day_processor = MissingDayProcessor(uow, clock, rules, ledger, store)
    attendance_service = AttendanceService(
        uow,
        clock,
        rules,
        calculator,
        ledger,
        store,
        qr_codec,
        missing_day_processor,
    )
    leave_service = LeaveService(uow, clock, ledger, store)
    holiday_service = HolidayService(uow, clock, ledger, store)
    payroll_report_service = PayrollReportService(uow)
    scheduler_jobs = SchedulerJobs(uow, clock, attendance_service, missing_day_processor, store)

    return Container(
        conn=conn,
        uow=uow,
        clock=clock,
        rules=rules,
        calculator=calculator,
        ledger=ledger,
        store=store,
        qr_codec=qr_codec,
        attendance_service=attendance_service,
        leave_service=leave_service,
        holiday_service=holiday_service,
        payroll_report_service=payroll_report_service,
        missing_day_processor=missing_day_processor,
        scheduler_jobs=scheduler_jobs,
    )
