from __future__ import annotations

from src.hr_reports.hr_reports.main import create_app


def test_create_app_registers_report_routes(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("AUTO_INIT_DB", "0")

    app = create_app()
    rules = {r.rule for r in app.url_map.iter_rules()}

    assert app.config["TESTING"] is True
    assert {
        "/api/reports/attendance",
        "/api/reports/attendance/monthly-summary",
        "/api/reports/attendance/export",
        "/api/reports/employees",
        "/api/reports/employee-attendance-summary",
        "/api/reports/employees/export",
        "/api/reports/leaves",
        "/api/reports/leave-balance",
        "/api/reports/leaves/monthly-summary",
        "/api/reports/leaves/export",
    } <= rules


def test_unauthenticated_request_never_touches_the_database(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    resp = create_app().test_client().get("/api/reports/leaves")

    assert resp.status_code == 401
