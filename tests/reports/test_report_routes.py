from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest
from flask import Flask

from conftest import COMPANY, FailingRepository
from src.hr_reports.hr_reports.reports.controller import register


def _client(service):
    app = Flask(__name__)
    app.secret_key = "test-secret"
    register(app, SimpleNamespace(report_service=service))
    return app.test_client()


@pytest.fixture
def client(store):
    client = _client(store.service())
    with client.session_transaction() as sess:
        sess["company_id"] = COMPANY
    return client


def test_requires_tenant_session(store):
    resp = _client(store.service()).get("/api/reports/attendance")

    assert resp.status_code == 401
    assert resp.get_json()["status"] == "error"


def test_attendance_report_envelope(client):
    resp = client.get("/api/reports/attendance?startDate=2025-01-01&endDate=2025-01-31&groupBy=employee")
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["status"] == "success"
    assert body["data"]["summary"]["totalRecords"] == 7
    assert body["data"]["groupBy"] == "employee"


def test_query_company_id_is_ignored(client):
    resp = client.get("/api/reports/attendance?companyId=c2")

    ids = {r["id"] for r in resp.get_json()["data"]["rawRecords"]}
    assert "a9" not in ids


@pytest.mark.parametrize(
    "url",
    [
        "/api/reports/attendance?groupBy=weekday",
        "/api/reports/attendance?startDate=yesterday",
        "/api/reports/attendance/monthly-summary?month=13",
        "/api/reports/employees?sortOrder=up",
        "/api/reports/employees/export?format=xlsx",
    ],
)
def test_bad_parameters_are_400(client, url):
    resp = client.get(url)

    assert resp.status_code == 400
    assert resp.get_json()["status"] == "error"


def test_store_failure_is_503(store):
    store.leaves = FailingRepository()
    client = _client(store.service())
    with client.session_transaction() as sess:
        sess["company_id"] = COMPANY

    resp = client.get("/api/reports/leaves")

    assert resp.status_code == 503
    assert resp.get_json()["error"] == "StoreUnavailable"


def test_department_lookup_failure_is_503(store):
    store.roster = FailingRepository()
    client = _client(store.service())
    with client.session_transaction() as sess:
        sess["company_id"] = COMPANY

    resp = client.get("/api/reports/attendance?department=d1")

    assert resp.status_code == 503
    assert resp.get_json()["error"] == "StoreUnavailable"


@pytest.mark.parametrize(
    "url, key",
    [
        ("/api/reports/attendance/monthly-summary?month=1&year=2025", "departmentSummaries"),
        ("/api/reports/employees", "genderDistribution"),
        ("/api/reports/employee-attendance-summary?month=1&year=2025", "period"),
        ("/api/reports/leaves", "byStatus"),
        ("/api/reports/leave-balance?year=2025", "period"),
        ("/api/reports/leaves/monthly-summary?month=2&year=2025", "byDepartment"),
    ],
)
def test_json_reports(client, url, key):
    resp = client.get(url)

    assert resp.status_code == 200
    assert key in resp.get_json()["data"]


@pytest.mark.parametrize(
    "url, prefix, rows",
    [
        ("/api/reports/attendance/export?startDate=2025-01-01&endDate=2025-01-31", "attendance-report-", 8),
        ("/api/reports/leaves/export", "leave-report-", 8),
        ("/api/reports/employees/export?format=csv", "employee-report-", 5),
    ],
)
def test_csv_exports(client, url, prefix, rows):
    resp = client.get(url)

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    disposition = resp.headers["Content-Disposition"]
    assert disposition.startswith(f'attachment; filename="{prefix}')
    assert disposition.endswith('.csv"')
    assert len(resp.get_data(as_text=True).split("\n")) == rows


def test_csv_export_logs_row_count(client, caplog):
    caplog.set_level(logging.INFO)

    resp = client.get("/api/reports/attendance/export?startDate=2025-01-01&endDate=2025-01-31")

    assert resp.status_code == 200
    assert any("(7 rows)" in r.getMessage() for r in caplog.records)
