import csv
import io
from datetime import date

import pytest

from src.attendance_payroll.attendance_payroll.main import create_app
from tests.fakes import at

EMPLOYEE = {"X-Employee-Id": "1"}
ADMIN = {"X-Employee-Id": "2", "X-Role": "admin"}


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def test_check_in_and_out(client, token, fixed_now):
    res = client.post("/api/attendance/check-in", json={"qr_token": token(fixed_now)}, headers=EMPLOYEE)
    assert res.status_code == 201
    body = res.get_json()
    assert body["success"] is True
    assert body["data"]["employee_id"] == 1
    assert body["data"]["is_late"] is True

    checkout_at = at(date(2026, 3, 10), 20, 0)
    res = client.post(
        "/api/attendance/check-out",
        json={"qr_token": token(checkout_at), "timestamp": checkout_at.isoformat()},
        headers=EMPLOYEE,
    )
    assert res.status_code == 200
    calc = res.get_json()["data"]["calculation"]
    assert calc["worked_minutes"] == 300
    assert calc["required_minutes"] == 270
    assert calc["salary_earned"] == "500.00"


def test_missing_identity_is_401(client, token, fixed_now):
    res = client.post("/api/attendance/check-in", json={"qr_token": token(fixed_now)})
    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_domain_errors_map_to_status_codes(client, fixed_now):
    res = client.post("/api/attendance/check-in", json={"qr_token": "nope"}, headers=EMPLOYEE)
    assert res.status_code == 400
    assert res.get_json()["message"].startswith("Invalid QR code")

    res = client.post("/api/attendance/check-out", json={"qr_token": fixed_now.isoformat() + "OFFICE_CHECKIN_SYSTEM"}, headers=EMPLOYEE)
    assert res.status_code == 409

    res = client.patch("/api/admin/leaves/999/approve", headers=ADMIN)
    assert res.status_code == 404


def test_admin_routes_need_admin_role(client):
    res = client.get("/api/admin/reports/monthly", headers=EMPLOYEE)
    assert res.status_code == 403


def test_leave_flow(client):
    res = client.post("/api/leaves", json={"date": "2026-03-12", "days": 1.5, "reason": "wedding"}, headers=EMPLOYEE)
    assert res.status_code == 201
    data = res.get_json()["data"]
    assert data["breakdown"]["paid_minutes"] == 810
    request_id = data["request"]["request_id"]

    res = client.get("/api/admin/leaves?status=pending", headers=ADMIN)
    assert [r["request_id"] for r in res.get_json()["data"]] == [request_id]

    res = client.patch(f"/api/admin/leaves/{request_id}/approve", headers=ADMIN)
    assert res.status_code == 200
    assert res.get_json()["data"]["request"]["status"] == "approved"

    res = client.get("/api/leaves/balance", headers=EMPLOYEE)
    assert res.get_json()["data"]["available_minutes"] == 270


def test_bad_date_is_400(client):
    res = client.post("/api/leaves", json={"date": "12/03/2026", "days": 1}, headers=EMPLOYEE)
    assert res.status_code == 400


def test_history_endpoint(client):
    res = client.get("/api/attendance/history?start=2026-03-02&end=2026-03-06", headers=EMPLOYEE)
    assert res.status_code == 200
    assert len(res.get_json()["data"]) == 5


def test_monthly_csv(client, container, token):
    check_in, check_out = at(date(2026, 3, 9), 12, 0), at(date(2026, 3, 9), 21, 0)
    container.attendance_service.check_in(2, check_in, token(check_in))
    container.attendance_service.check_out(2, check_out, token(check_out))

    res = client.get("/api/admin/reports/monthly.csv?month=3&year=2026", headers=ADMIN)
    assert res.status_code == 200
    assert res.mimetype == "text/csv"
    rows = list(csv.DictReader(io.StringIO(res.data.decode("utf-8-sig"))))
    assert rows == [
        {
            "employee_id": "2",
            "name": "Bilal Ahmed",
            "total_worked_minutes": "540",
            "total_short_minutes": "0",
            "total_salary_earned": "1500.00",
        }
    ]


def test_qr_image(client):
    res = client.get("/api/admin/qr/image", headers=ADMIN)
    assert res.status_code == 200
    assert res.mimetype == "image/png"
    assert res.data.startswith(b"\x89PNG")


def test_holiday_endpoints(client):
    res = client.post("/api/admin/holidays", json={"date": "2026-03-23", "name": "Pakistan Day"}, headers=ADMIN)
    assert res.status_code == 201
    assert res.get_json()["data"]["stamped"] == 2

    res = client.get("/api/admin/holidays?year=2026", headers=ADMIN)
    assert [h["name"] for h in res.get_json()["data"]] == ["Pakistan Day"]


def test_cli_auto_checkout(app, container, token):
    moment = at(date(2026, 3, 9), 12, 0)
    container.attendance_service.check_in(1, moment, token(moment))

    result = app.test_cli_runner().invoke(args=["auto-checkout", "--date", "2026-03-09"])
    assert "processed=1" in result.output
