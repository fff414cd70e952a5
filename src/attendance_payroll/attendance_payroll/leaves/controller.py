from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.enums import LeaveStatus
from ..core.exceptions import ValidationError
from ..web import admin_required, employee_required, int_arg, json_body, ok, required_field


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    def _status_arg():
        raw = (request.args.get("status") or "").strip().lower()
        if not raw:
            return None
        try:
            return LeaveStatus(raw)
        except ValueError:
            raise ValidationError(f"Unknown leave status: {raw}")

    @app.route("/api/leaves", methods=["POST"], endpoint="leave_request")
    @employee_required
    def request_leave():
        data = json_body()
        leave_date = parse_iso_date(str(required_field(data, "date")))
        if data.get("hours") is not None:
            amount, in_hours = data["hours"], True
        else:
            amount, in_hours = required_field(data, "days"), False

        leave, breakdown = service.request_leave(
            g.employee_id,
            leave_date,
            amount,
            data.get("reason"),
            in_hours=in_hours,
        )
        return ok({"request": leave, "breakdown": breakdown}, message="Leave request submitted", status=201)

    @app.route("/api/leaves", methods=["GET"], endpoint="leave_my_requests")
    @employee_required
    def my_requests():
        return ok(service.list_my_requests(g.employee_id, month=int_arg("month"), year=int_arg("year")))

    @app.route("/api/leaves/balance", methods=["GET"], endpoint="leave_balance")
    @employee_required
    def balance():
        return ok(service.current_balance(g.employee_id, month=int_arg("month"), year=int_arg("year")))

    # ===== ADMIN =====

    @app.route("/api/admin/leaves", methods=["GET"], endpoint="admin_leave_list")
    @admin_required
    def list_requests():
        return ok(service.list_requests(status=_status_arg(), employee_id=int_arg("employee_id")))

    @app.route("/api/admin/leaves/<int:request_id>/approve", methods=["PATCH"], endpoint="admin_leave_approve")
    @admin_required
    def approve(request_id: int):
        leave, breakdown = service.approve_leave(request_id)
        return ok({"request": leave, "breakdown": breakdown}, message="Leave request approved")

    @app.route("/api/admin/leaves/<int:request_id>/reject", methods=["PATCH"], endpoint="admin_leave_reject")
    @admin_required
    def reject(request_id: int):
        return ok(service.reject_leave(request_id), message="Leave request rejected")
