from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..web import admin_required, int_arg, json_body, ok, required_field


def register(app: Flask, container: Container) -> None:
    service = container.holiday_service

    @app.route("/api/admin/holidays", methods=["POST"], endpoint="admin_holiday_create")
    @admin_required
    def create():
        data = json_body()
        result = service.create_holiday(
            parse_iso_date(str(required_field(data, "date"))),
            str(required_field(data, "name")),
            data.get("description"),
        )
        return ok(result, message="Public holiday created", status=201)

    @app.route("/api/admin/holidays", methods=["GET"], endpoint="admin_holiday_list")
    @admin_required
    def list_holidays():
        return ok(service.list_holidays(int_arg("year")))

    @app.route("/api/admin/holidays/<int:holiday_id>", methods=["PATCH"], endpoint="admin_holiday_update")
    @admin_required
    def update(holiday_id: int):
        data = json_body()
        holiday = service.update_holiday(
            holiday_id,
            name=str(required_field(data, "name")),
            description=data.get("description"),
        )
        return ok(holiday, message="Public holiday updated")

    @app.route("/api/admin/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="admin_holiday_delete")
    @admin_required
    def delete(holiday_id: int):
        return ok(service.delete_holiday(holiday_id), message="Public holiday deleted")
