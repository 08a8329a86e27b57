from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..container import Container
from ..core.exceptions import AuthorizationError, DomainError, StoreUnavailable, ValidationError
from .exporter import ExportFile
from .filters import ReportFilter

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.report_service

    def tenant_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if not session.get("company_id"):
                return _error(AuthorizationError("Company context is required"), 401)
            return view(*args, **kwargs)

        return wrapper

    def _filter() -> ReportFilter:
        # Tenant comes from the session only; a companyId query field is ignored.
        return ReportFilter.from_params(str(session["company_id"]), request.args)

    def _error(exc: Exception, status: int):
        return jsonify({"status": "error", "message": str(exc), "error": type(exc).__name__}), status

    def _run(build):
        """Call a report builder and map domain failures to HTTP responses."""
        try:
            return build()
        except ValidationError as e:
            return _error(e, 400)
        except StoreUnavailable as e:
            logger.error("Report store unavailable: %s", e.detail, extra={"company_id": session.get("company_id")})
            return _error(e, 503)
        except DomainError as e:
            return _error(e, 400)
        except Exception as e:
            logger.exception("Unexpected report failure", extra={"company_id": session.get("company_id")})
            return _error(e, 500)

    def _json(result):
        return jsonify({"status": "success", "data": result.to_dict()})

    def _csv(export: ExportFile):
        logger.info(
            "Exported %s (%d rows)", export.filename, export.row_count, extra={"company_id": session.get("company_id")}
        )
        return app.response_class(
            export.content,
            mimetype=export.media_type,
            headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
        )

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="attendance_report")
    @tenant_required
    def attendance_report():
        return _run(lambda: _json(service.attendance_report(_filter())))

    @app.route("/api/reports/attendance/monthly-summary", methods=["GET"], endpoint="monthly_attendance_summary")
    @tenant_required
    def monthly_attendance_summary():
        return _run(lambda: _json(service.monthly_attendance_summary(_filter())))

    @app.route("/api/reports/attendance/export", methods=["GET"], endpoint="attendance_export")
    @tenant_required
    def attendance_export():
        return _run(lambda: _csv(service.export_attendance(_filter())))

    @app.route("/api/reports/employees", methods=["GET"], endpoint="employee_report")
    @tenant_required
    def employee_report():
        return _run(lambda: _json(service.employee_report(_filter())))

    @app.route("/api/reports/employee-attendance-summary", methods=["GET"], endpoint="employee_attendance_summary")
    @tenant_required
    def employee_attendance_summary():
        return _run(lambda: _json(service.employee_attendance_summary(_filter())))

    @app.route("/api/reports/employees/export", methods=["GET"], endpoint="employee_export")
    @tenant_required
    def employee_export():
        export_format = request.args.get("format")
        return _run(lambda: _csv(service.export_employees(_filter(), export_format=export_format)))

    @app.route("/api/reports/leaves", methods=["GET"], endpoint="leave_report")
    @tenant_required
    def leave_report():
        return _run(lambda: _json(service.leave_report(_filter())))

    @app.route("/api/reports/leave-balance", methods=["GET"], endpoint="leave_balance_report")
    @tenant_required
    def leave_balance_report():
        return _run(lambda: _json(service.leave_balance_report(_filter())))

    @app.route("/api/reports/leaves/monthly-summary", methods=["GET"], endpoint="monthly_leave_summary")
    @tenant_required
    def monthly_leave_summary():
        return _run(lambda: _json(service.monthly_leave_summary(_filter())))

    @app.route("/api/reports/leaves/export", methods=["GET"], endpoint="leave_export")
    @tenant_required
    def leave_export():
        return _run(lambda: _csv(service.export_leaves(_filter())))
