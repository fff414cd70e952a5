from __future__ import annotations

import csv
import io

from flask import Flask

from ..container import Container
from ..core.exceptions import ValidationError
from ..web import admin_required, int_arg, ok
from .service import REPORT_COLUMNS


def register(app: Flask, container: Container) -> None:
    service = container.payroll_report_service

    def _month_year() -> tuple[int, int]:
        today = container.clock.today()
        month = int_arg("month") or today.month
        year = int_arg("year") or today.year
        if not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        return month, year

    @app.route("/api/admin/reports/monthly", methods=["GET"], endpoint="admin_report_monthly")
    @admin_required
    def monthly():
        month, year = _month_year()
        return ok({"month": month, "year": year, "rows": service.monthly_salary_report(month, year)})

    @app.route("/api/admin/reports/monthly.csv", methods=["GET"], endpoint="admin_report_monthly_csv")
    @admin_required
    def monthly_csv():
        month, year = _month_year()

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_COLUMNS)
        writer.writeheader()
        for row in service.monthly_report_dicts(month, year):
            writer.writerow(row)

        filename = f"salary_report_{year}_{month:02d}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/admin/reports/employees/<int:employee_id>", methods=["GET"], endpoint="admin_report_employee")
    @admin_required
    def employee(employee_id: int):
        month, year = _month_year()
        return ok(service.employee_report(employee_id, month, year))
