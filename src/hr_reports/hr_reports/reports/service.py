from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_READ_WORKERS, STANDARD_WORK_HOURS
from ..core.enums import EmploymentStatus, GroupKind, LeaveStatus
from ..core.exceptions import DomainError, StoreUnavailable, ValidationError
from ..employees.repository import RosterRepository
from ..leaves.repository import LeaveRepository, LeaveTypeRepository
from .exporter import (
    ATTENDANCE_EXPORT_HEADER,
    EMPLOYEE_EXPORT_HEADER,
    LEAVE_EXPORT_HEADER,
    CsvExporter,
    ExportFile,
)
from .filters import QueryFilterBuilder, ReportFilter
from .grouping.base import ATTENDANCE_PROFILE, LEAVE_PROFILE, ROSTER_PROFILE
from .grouping.engine import GroupingEngine
from .grouping.factory import GroupStrategyFactory
from .joiner import JoinedAttendance, JoinedEmployee, JoinedLeave, Joiner
from .model import ReportResult
from .predicates import DateField, DateRange, RosterPredicate, StorePredicate
from .statistics import EmployeeAttendance, StatisticsCalculator, safe_average, to_fixed

logger = logging.getLogger(__name__)

ATTENDANCE_DIMENSIONS = (GroupKind.DATE, GroupKind.EMPLOYEE, GroupKind.DEPARTMENT)
LEAVE_DIMENSIONS = (
    GroupKind.LEAVE_TYPE,
    GroupKind.STATUS,
    GroupKind.EMPLOYEE,
    GroupKind.DEPARTMENT,
    GroupKind.DATE,
)
EXPORT_FORMATS = ("csv",)


class ReportService:
    """Report facade.

    Every entry point is a fixed composition of the same stages: build
    predicates, read the stores in parallel, join, group, compute statistics
    and assemble a ReportResult (or an ExportFile for the CSV exports).
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        leave_types: LeaveTypeRepository,
        roster: RosterRepository,
        *,
        filters: Optional[QueryFilterBuilder] = None,
        grouping: Optional[GroupingEngine] = None,
        calculator: Optional[StatisticsCalculator] = None,
        exporter: Optional[CsvExporter] = None,
        read_workers: int = DEFAULT_READ_WORKERS,
        standard_work_hours: float = STANDARD_WORK_HOURS,
    ):
        self._attendance = attendance
        self._leaves = leaves
        self._leave_types = leave_types
        self._roster = roster
        self._filters = filters or QueryFilterBuilder(roster)
        self._grouping = grouping or GroupingEngine(GroupStrategyFactory())
        self._calculator = calculator or StatisticsCalculator(standard_work_hours=standard_work_hours)
        self._exporter = exporter or CsvExporter()
        self._read_workers = max(1, int(read_workers))

    # ------------------------------------------------------------------
    # Attendance
    # ------------------------------------------------------------------
    def attendance_report(self, report_filter: ReportFilter) -> ReportResult:
        started = time.perf_counter()
        kind = GroupStrategyFactory.parse(
            report_filter.group_by, allowed=ATTENDANCE_DIMENSIONS, default=GroupKind.DATE
        )
        joined = self._attendance_rows(report_filter)
        tally = self._calculator.attendance_tally(joined)

        summary = {
            "totalRecords": tally.total_days,
            "presentCount": tally.present,
            "absentCount": tally.absent,
            "halfDayCount": tally.half_day,
            "leaveCount": tally.leave,
            "totalWorkHours": to_fixed(tally.total_work_hours),
            "avgWorkHours": to_fixed(tally.avg_work_hours),
            "totalOvertime": to_fixed(tally.total_overtime),
            "attendancePercentage": to_fixed(tally.attendance_percentage),
        }
        result = ReportResult(
            summary=summary,
            group_by=kind.value,
            grouped_data=self._grouping.group_dicts(joined, kind, ATTENDANCE_PROFILE),
            raw_records=[r.to_dict() for r in joined],
        )
        self._log_generated("attendance", report_filter.company_id, len(joined), started)
        return result

    def monthly_attendance_summary(
        self, report_filter: ReportFilter, *, today: Optional[date] = None
    ) -> ReportResult:
        started = time.perf_counter()
        year, month = report_filter.period(today=today)
        joined, summaries = self._monthly_attendance(report_filter, today=today)

        company = self._calculator.company_rollup(summaries)
        departments = self._calculator.department_rollups(summaries)
        summary = company.to_dict()
        summary.pop("department")

        result = ReportResult(
            summary=summary,
            group_by=GroupKind.EMPLOYEE.value,
            grouped_data=[s.to_dict() for s in summaries],
            raw_records=[r.to_dict() for r in joined],
            sections={
                "period": {"month": month, "year": year},
                "departmentSummaries": [d.to_dict() for d in departments],
            },
        )
        self._log_generated("monthly_attendance_summary", report_filter.company_id, len(joined), started)
        return result

    def employee_attendance_summary(
        self, report_filter: ReportFilter, *, today: Optional[date] = None
    ) -> ReportResult:
        started = time.perf_counter()
        year, month = report_filter.period(today=today)
        joined, summaries = self._monthly_attendance(report_filter, today=today)

        totals = self._calculator.company_rollup(summaries)
        summary = {
            "totalEmployees": totals.total_employees,
            "totalPresentDays": totals.tally.present,
            "totalAbsentDays": totals.tally.absent,
            "totalHalfDays": totals.tally.half_day,
            "totalLeaveDays": totals.tally.leave,
            "totalWorkHours": to_fixed(totals.tally.total_work_hours),
            "totalOvertime": to_fixed(totals.tally.total_overtime),
            "avgAttendancePercentage": to_fixed(totals.avg_attendance_percentage),
        }
        result = ReportResult(
            summary=summary,
            group_by=GroupKind.EMPLOYEE.value,
            grouped_data=[s.to_dict() for s in summaries],
            raw_records=[r.to_dict() for r in joined],
            sections={"period": {"month": month, "year": year}},
        )
        self._log_generated("employee_attendance_summary", report_filter.company_id, len(joined), started)
        return result

    def export_attendance(self, report_filter: ReportFilter, *, now: Optional[datetime] = None) -> ExportFile:
        started = time.perf_counter()
        joined = self._attendance_rows(report_filter)
        rows = (
            (
                r.record.work_date,
                r.employee.code,
                r.employee.name,
                r.employee.email,
                r.record.clock_in,
                r.record.clock_out,
                r.record.work_hours,
                r.record.status.value,
            )
            for r in joined
        )
        export = self._exporter.export("attendance-report", ATTENDANCE_EXPORT_HEADER, rows, now=now)
        self._log_generated("attendance_export", report_filter.company_id, len(joined), started)
        return export

    # ------------------------------------------------------------------
    # Employees
    # ------------------------------------------------------------------
    def employee_report(self, report_filter: ReportFilter) -> ReportResult:
        started = time.perf_counter()
        joined = self._employee_rows(report_filter)

        by_status = {g.key: g.count for g in self._grouping.group(joined, GroupKind.STATUS, ROSTER_PROFILE)}
        summary = {
            "totalEmployees": len(joined),
            "activeEmployees": by_status.get(EmploymentStatus.ACTIVE.value, 0),
            "onProbation": by_status.get(EmploymentStatus.PROBATION.value, 0),
            "resigned": by_status.get(EmploymentStatus.RESIGNED.value, 0),
            "totalPayroll": to_fixed(sum(e.measure for e in joined)),
        }
        result = ReportResult(
            summary=summary,
            group_by=GroupKind.DEPARTMENT.value,
            grouped_data=self._grouping.group_dicts(joined, GroupKind.DEPARTMENT, ROSTER_PROFILE),
            raw_records=[e.to_dict() for e in joined],
            sections={
                "byStatus": by_status,
                "byDesignation": self._grouping.group_dicts(joined, GroupKind.DESIGNATION, ROSTER_PROFILE),
                "genderDistribution": self._grouping.group_dicts(joined, GroupKind.GENDER, ROSTER_PROFILE),
                "employmentTypeDistribution": self._grouping.group_dicts(
                    joined, GroupKind.EMPLOYMENT_TYPE, ROSTER_PROFILE
                ),
            },
        )
        self._log_generated("employees", report_filter.company_id, len(joined), started)
        return result

    def export_employees(
        self,
        report_filter: ReportFilter,
        *,
        export_format: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ExportFile:
        export_format = (export_format or "csv").lower()
        if export_format not in EXPORT_FORMATS:
            raise ValidationError(f"Unsupported export format '{export_format}'")

        started = time.perf_counter()
        joined = self._employee_rows(report_filter)
        rows = (
            (
                e.entry.employee_code,
                e.employee.name,
                e.entry.email,
                e.employee.department_name,
                e.designation_title,
                e.entry.employment_status,
                e.entry.joining_date,
                e.entry.salary.basic,
                e.entry.salary.hra,
                e.entry.salary.allowances,
                e.entry.salary.total,
            )
            for e in joined
        )
        export = self._exporter.export("employee-report", EMPLOYEE_EXPORT_HEADER, rows, now=now)
        self._log_generated("employee_export", report_filter.company_id, len(joined), started)
        return export

    # ------------------------------------------------------------------
    # Leaves
    # ------------------------------------------------------------------
    def leave_report(self, report_filter: ReportFilter) -> ReportResult:
        started = time.perf_counter()
        kind = GroupStrategyFactory.parse(
            report_filter.group_by, allowed=LEAVE_DIMENSIONS, default=GroupKind.LEAVE_TYPE
        )
        joined = self._leave_rows(self._filters.leave_predicate(report_filter), report_filter.company_id)
        tally = self._calculator.leave_tally(joined)

        summary = {
            "totalLeaves": tally.total,
            "pendingCount": tally.count(LeaveStatus.PENDING),
            "approvedCount": tally.count(LeaveStatus.APPROVED),
            "rejectedCount": tally.count(LeaveStatus.REJECTED),
            "cancelledCount": tally.count(LeaveStatus.CANCELLED),
            "totalLeaveDays": to_fixed(tally.total_days),
            "approvedLeaveDays": to_fixed(tally.approved_days),
        }
        result = ReportResult(
            summary=summary,
            group_by=kind.value,
            grouped_data=self._grouping.group_dicts(joined, kind, LEAVE_PROFILE),
            raw_records=[r.to_dict() for r in joined],
            sections={
                "byLeaveType": self._grouping.group_dicts(joined, GroupKind.LEAVE_TYPE, LEAVE_PROFILE),
                "byStatus": dict(tally.by_status),
            },
        )
        self._log_generated("leaves", report_filter.company_id, len(joined), started)
        return result

    def leave_balance_report(self, report_filter: ReportFilter, *, today: Optional[date] = None) -> ReportResult:
        started = time.perf_counter()
        company_id = report_filter.company_id
        year = report_filter.year or (today or now_local().date()).year
        year_range = DateRange(start=date(year, 1, 1), end=date(year, 12, 31))
        leave_predicate = StorePredicate(
            company_id=company_id,
            date_range=year_range,
            date_field=DateField.FROM_DATE,
            status=LeaveStatus.APPROVED.value,
        )
        roster_predicate = self._filters.roster_predicate(report_filter, scoped=False)

        reads = self._gather(
            "leave_balance",
            company_id,
            roster=lambda: self._roster.find(roster_predicate),
            leave_types=lambda: self._leave_types.list_active(company_id),
            leaves=lambda: self._leaves.find(leave_predicate),
        )
        joiner = Joiner(company_id, reads["roster"], reads["leave_types"])
        employees = joiner.join_roster(reads["roster"])
        leaves_by_employee = self._grouping.partition(joiner.join_leaves(reads["leaves"]), GroupKind.EMPLOYEE)
        leave_types = reads["leave_types"]

        balances = []
        employee_rows = []
        for e in employees:
            approved = [j.record for j in leaves_by_employee.get(e.entry.employee_ref, ())]
            employee_balances = self._calculator.leave_balances(
                employee_id=e.entry.employee_ref,
                leave_types=leave_types,
                approved_leaves=approved,
                year=year,
            )
            balances.append(employee_balances)
            employee_rows.append(
                {
                    "employeeId": e.employee.code,
                    "name": e.employee.name,
                    "email": e.employee.email,
                    "department": e.employee.department_name,
                    "leaveBalances": [b.to_dict() for b in employee_balances],
                }
            )

        flat = [b for employee_balances in balances for b in employee_balances]
        total_quota = sum(b.annual_quota for b in flat)
        total_used = sum(b.used for b in flat)
        summary = {
            "totalEmployees": len(employees),
            "totalLeaveTypes": len(leave_types),
            "totalQuota": to_fixed(total_quota),
            "totalUsed": to_fixed(total_used),
            "totalBalance": to_fixed(total_quota - total_used),
            "avgUsedPerEmployee": to_fixed(safe_average(total_used, len(employees))),
        }
        result = ReportResult(
            summary=summary,
            group_by=GroupKind.LEAVE_TYPE.value,
            grouped_data=self._calculator.leave_type_stats(leave_types, balances),
            raw_records=employee_rows,
            sections={"period": {"year": year}},
        )
        self._log_generated("leave_balance", company_id, len(employees), started)
        return result

    def monthly_leave_summary(self, report_filter: ReportFilter, *, today: Optional[date] = None) -> ReportResult:
        started = time.perf_counter()
        year, month = report_filter.period(today=today)
        predicate = self._filters.leave_predicate(
            report_filter,
            date_field=DateField.FROM_DATE,
            date_range=report_filter.month_range(today=today),
            scoped=False,
        )
        joined = self._leave_rows(predicate, report_filter.company_id)
        tally = self._calculator.leave_tally(joined)

        summary = {
            "totalLeaves": tally.total,
            "totalDays": to_fixed(tally.total_days),
            "approved": tally.count(LeaveStatus.APPROVED),
            "pending": tally.count(LeaveStatus.PENDING),
            "rejected": tally.count(LeaveStatus.REJECTED),
            "cancelled": tally.count(LeaveStatus.CANCELLED),
        }
        result = ReportResult(
            summary=summary,
            group_by=GroupKind.LEAVE_TYPE.value,
            grouped_data=self._grouping.group_dicts(joined, GroupKind.LEAVE_TYPE, LEAVE_PROFILE),
            raw_records=[r.to_dict() for r in joined],
            sections={
                "period": {"month": month, "year": year},
                "byDepartment": self._grouping.group_dicts(joined, GroupKind.DEPARTMENT, LEAVE_PROFILE),
            },
        )
        self._log_generated("monthly_leave_summary", report_filter.company_id, len(joined), started)
        return result

    def export_leaves(self, report_filter: ReportFilter, *, now: Optional[datetime] = None) -> ExportFile:
        started = time.perf_counter()
        joined = self._leave_rows(self._filters.leave_predicate(report_filter), report_filter.company_id)
        rows = (
            (
                r.record.leave_code,
                r.employee.code,
                r.employee.name,
                r.leave_type_name,
                r.record.from_date,
                r.record.to_date,
                r.record.number_of_days,
                r.record.reason,
                r.record.status.value,
                r.record.created_at,
            )
            for r in joined
        )
        export = self._exporter.export("leave-report", LEAVE_EXPORT_HEADER, rows, now=now)
        self._log_generated("leave_export", report_filter.company_id, len(joined), started)
        return export

    # ------------------------------------------------------------------
    # Shared stages
    # ------------------------------------------------------------------
    def _attendance_rows(self, report_filter: ReportFilter) -> list[JoinedAttendance]:
        company_id = report_filter.company_id
        predicate = self._filters.attendance_predicate(report_filter)
        reads = self._gather(
            "attendance",
            company_id,
            attendance=lambda: self._attendance.find(predicate),
            roster=lambda: self._roster.find(RosterPredicate(company_id=company_id)),
        )
        return Joiner(company_id, reads["roster"]).join_attendance(reads["attendance"])

    def _monthly_attendance(
        self, report_filter: ReportFilter, *, today: Optional[date]
    ) -> tuple[list[JoinedAttendance], list[EmployeeAttendance]]:
        """Attendance of the report month and one summary per (department-filtered) roster employee."""
        company_id = report_filter.company_id
        predicate = self._filters.department_predicate(
            report_filter, date_range=report_filter.month_range(today=today)
        )
        roster_predicate = self._filters.roster_predicate(report_filter, scoped=False)
        reads = self._gather(
            "monthly_attendance",
            company_id,
            attendance=lambda: self._attendance.find(predicate),
            roster=lambda: self._roster.find(roster_predicate),
        )
        joiner = Joiner(company_id, reads["roster"])
        employees = joiner.join_roster(reads["roster"])
        joined = joiner.join_attendance(reads["attendance"])
        summaries = self._calculator.employee_attendance(
            employees, self._grouping.partition(joined, GroupKind.EMPLOYEE)
        )
        return joined, summaries

    def _employee_rows(self, report_filter: ReportFilter) -> list[JoinedEmployee]:
        predicate = self._filters.roster_predicate(report_filter)
        reads = self._gather("employees", report_filter.company_id, roster=lambda: self._roster.find(predicate))
        return Joiner(report_filter.company_id, reads["roster"]).join_roster(reads["roster"])

    def _leave_rows(self, predicate: StorePredicate, company_id: str) -> list[JoinedLeave]:
        reads = self._gather(
            "leaves",
            company_id,
            leaves=lambda: self._leaves.find(predicate),
            roster=lambda: self._roster.find(RosterPredicate(company_id=company_id)),
            leave_types=lambda: self._leave_types.list_active(company_id),
        )
        return Joiner(company_id, reads["roster"], reads["leave_types"]).join_leaves(reads["leaves"])

    def _gather(self, report: str, company_id: str, **reads: Callable[[], Sequence[Any]]) -> dict[str, list]:
        """Run independent store reads concurrently; any failure aborts the report."""
        workers = min(self._read_workers, len(reads))
        results: dict[str, list] = {}
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="report-read") as pool:
            futures = {name: pool.submit(read) for name, read in reads.items()}
            for name, future in futures.items():
                try:
                    results[name] = list(future.result())
                except StoreUnavailable as exc:
                    logger.error(
                        "Read '%s' failed: %s",
                        name,
                        exc.detail,
                        extra={"company_id": company_id, "report": report},
                    )
                    raise
                except DomainError:
                    raise
                except Exception as exc:
                    logger.error(
                        "Read '%s' failed: %s",
                        name,
                        exc,
                        extra={"company_id": company_id, "report": report},
                    )
                    raise StoreUnavailable(detail=str(exc)) from exc
        return results

    @staticmethod
    def _log_generated(report: str, company_id: str, total: int, started: float) -> None:
        logger.info(
            "Generated %s report for company %s (%d records)",
            report,
            company_id,
            total,
            extra={
                "company_id": company_id,
                "report": report,
                "total_records": total,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
