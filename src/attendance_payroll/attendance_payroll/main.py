from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.datetime_utils import parse_iso_date
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .holidays.controller import register as register_holidays
from .leaves.controller import register as register_leaves
from .payroll.controller import register as register_payroll
from .web import register_error_handlers

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def register_commands(app: Flask, container: Container) -> None:
    @app.cli.command("auto-checkout")
    @click.option("--date", "for_date", default=None, help="Day to close (YYYY-MM-DD); defaults to yesterday.")
    def auto_checkout(for_date: Optional[str]):
        """Close attendance records left checked in."""
        day = parse_iso_date(for_date) if for_date else None
        result = container.scheduler_jobs.run_auto_checkout(day)
        click.echo(f"auto-checkout: processed={result.processed} skipped={result.skipped} failed={len(result.failed)}")

    @app.cli.command("daily-backfill")
    def daily_backfill():
        """Create today's placeholders and charge missing past working days."""
        result = container.scheduler_jobs.run_daily_backfill()
        click.echo(f"daily-backfill: processed={result.processed} failed={len(result.failed)}")

    @app.cli.command("process-missing-days")
    @click.option("--month", type=int, required=True)
    @click.option("--year", type=int, required=True)
    def process_missing_days(month: int, year: int):
        """Charge missing working days of one month for every active employee."""
        result = container.scheduler_jobs.process_missing_days_for_all(month, year)
        click.echo(
            f"process-missing-days: processed={result.processed} skipped={result.skipped} failed={len(result.failed)}"
        )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["QR_TOKEN"] = getattr(settings, "QR_TOKEN", "OFFICE_CHECKIN_SYSTEM")

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")

        container = build_container(
            db_config=db_config,
            attendance=getattr(settings, "ATTENDANCE", None),
            qr_token=app.config["QR_TOKEN"],
            qr_validity_minutes=int(getattr(settings, "QR_VALIDITY_MINUTES", 5)),
        )

    app.extensions["attendance_payroll"] = container
    register_error_handlers(app)
    register_attendance(app, container)
    register_leaves(app, container)
    register_holidays(app, container)
    register_payroll(app, container)
    register_commands(app, container)

    return app
