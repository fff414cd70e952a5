from __future__ import annotations

from flask import Flask, g, request, send_file

from ..common.datetime_utils import parse_iso_date
from ..common.qr_token import decode_qr_image
from ..container import Container
from ..core.enums import NextAction
from ..core.exceptions import ValidationError
from ..web import (
    admin_required,
    date_arg,
    datetime_field,
    employee_required,
    json_body,
    ok,
    required_field,
)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    tz = container.clock.tz

    def _timestamp(data: dict):
        return datetime_field(data, "timestamp", tz=tz, required=False) or container.clock.now()

    def _checkout_payload(result):
        record, calc = result
        return {"attendance": record, "calculation": calc}

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @employee_required
    def check_in():
        data = json_body()
        record = service.check_in(g.employee_id, _timestamp(data), str(required_field(data, "qr_token")))
        return ok(record, message="Check-in successful", status=201)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @employee_required
    def check_out():
        data = json_body()
        result = service.check_out(g.employee_id, _timestamp(data), str(required_field(data, "qr_token")))
        return ok(_checkout_payload(result), message="Check-out successful")

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="attendance_scan")
    @employee_required
    def scan():
        """Decode an uploaded QR photo and check in or out depending on today's state."""
        if "image" not in request.files:
            raise ValidationError("Missing image file")
        token = decode_qr_image(request.files["image"].stream)
        now = container.clock.now()

        status = service.today_status(g.employee_id)
        if status.next_action == NextAction.CHECK_OUT:
            return ok(_checkout_payload(service.check_out(g.employee_id, now, token)), message="Check-out successful")
        return ok(service.check_in(g.employee_id, now, token), message="Check-in successful", status=201)

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @employee_required
    def today():
        return ok(service.today_status(g.employee_id))

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @employee_required
    def history():
        records = service.history(g.employee_id, start=date_arg("start"), end=date_arg("end"))
        return ok(records)

    @app.route("/api/attendance/dashboard", methods=["GET"], endpoint="attendance_dashboard")
    @employee_required
    def dashboard():
        return ok(service.dashboard(g.employee_id))

    # ===== ADMIN =====

    @app.route("/api/admin/attendance", methods=["POST"], endpoint="admin_attendance_create")
    @admin_required
    def admin_create():
        data = json_body()
        result = service.admin_create(
            int(required_field(data, "employee_id")),
            parse_iso_date(str(required_field(data, "date"))),
            datetime_field(data, "check_in", tz=tz),
            datetime_field(data, "check_out", tz=tz),
        )
        return ok(_checkout_payload(result), message="Attendance created", status=201)

    @app.route("/api/admin/attendance/<int:attendance_id>", methods=["PATCH"], endpoint="admin_attendance_update")
    @admin_required
    def admin_update(attendance_id: int):
        data = json_body()
        result = service.admin_correct(
            attendance_id,
            check_in=datetime_field(data, "check_in", tz=tz, required=False),
            check_out=datetime_field(data, "check_out", tz=tz, required=False),
        )
        return ok(_checkout_payload(result), message="Attendance updated")

    @app.route("/api/admin/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="admin_attendance_delete")
    @admin_required
    def admin_delete(attendance_id: int):
        service.delete_attendance(attendance_id)
        return ok(message="Attendance deleted")

    @app.route("/api/admin/qr/image", methods=["GET"], endpoint="admin_qr_image")
    @admin_required
    def admin_qr_image():
        """PNG of a fresh token; it stays valid for the configured tolerance."""
        token = container.qr_codec.generate(container.clock.now())
        return send_file(container.qr_codec.render_png(token), mimetype="image/png")
