"""WSGI / Flask CLI entry point.

    flask --app app run
    flask --app app auto-checkout --date 2026-03-02
    flask --app app daily-backfill
"""

from src.attendance_payroll.attendance_payroll.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config.get("DEBUG", False))
