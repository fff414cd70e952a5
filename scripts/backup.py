"""Dump the attendance/payroll database with `mysqldump`.

Only the tables this service owns are dumped unless --all is given.
"""

from __future__ import annotations

import argparse
import importlib
import subprocess
import sys
from datetime import datetime
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

OWNED_TABLES = [
    "employees",
    "attendance_records",
    "monthly_attendance_summaries",
    "salary_deduction_ledger",
    "leave_requests",
    "leave_balances",
    "public_holidays",
]


def build_command(db: dict, *, all_tables: bool = False) -> list[str]:
    cmd = [
        "mysqldump",
        f"-h{db['host']}",
        f"-P{db.get('port', 3306)}",
        f"-u{db['user']}",
        f"-p{db['password']}",
        "--single-transaction",
        db["database"],
    ]
    if not all_tables:
        cmd.extend(OWNED_TABLES)
    return cmd


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--output-dir", default=str(REPO_ROOT / "backups"))
    parser.add_argument("--all", action="store_true", help="dump every table of the database")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db = settings.DB_CONFIG

    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"{db['database']}_{ts}.sql"

    try:
        with out_file.open("wb") as f:
            subprocess.run(build_command(db, all_tables=args.all), stdout=f, stderr=subprocess.PIPE, check=True)
        print(f"OK: Backup created: {out_file}")
    except FileNotFoundError:
        raise SystemExit("`mysqldump` not found. Install the MySQL client tools.")


if __name__ == "__main__":
    main()
