from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

import pytest

from src.hr_reports.hr_reports.attendance.model import AttendanceRecord
from src.hr_reports.hr_reports.core.enums import AttendanceStatus, LeaveStatus
from src.hr_reports.hr_reports.employees.model import RosterEntry, SalaryComponents
from src.hr_reports.hr_reports.leaves.model import LeaveRecord, LeaveTypeDefinition
from src.hr_reports.hr_reports.reports.predicates import DateField, RosterPredicate, StorePredicate
from src.hr_reports.hr_reports.reports.service import ReportService

COMPANY = "c1"
OTHER_COMPANY = "c2"


class InMemoryAttendance:
    def __init__(self, records: list[AttendanceRecord]):
        self.records = list(records)
        self.calls: list[StorePredicate] = []

    def find(self, predicate: StorePredicate) -> list[AttendanceRecord]:
        self.calls.append(predicate)
        rows = [
            r
            for r in self.records
            if predicate.matches(
                company_id=r.company_id,
                employee_id=r.employee_id,
                on_date=r.work_date,
                status=r.status.value,
            )
        ]
        return sorted(rows, key=lambda r: r.work_date, reverse=True)


class InMemoryLeaves:
    def __init__(self, records: list[LeaveRecord]):
        self.records = list(records)
        self.calls: list[StorePredicate] = []

    def find(self, predicate: StorePredicate) -> list[LeaveRecord]:
        self.calls.append(predicate)
        rows = []
        for r in self.records:
            on_date = r.from_date if predicate.date_field is DateField.FROM_DATE else r.created_at
            if predicate.matches(
                company_id=r.company_id,
                employee_id=r.employee_id,
                on_date=on_date,
                status=r.status.value,
                leave_type_id=r.leave_type_id,
            ):
                rows.append(r)
        return sorted(rows, key=lambda r: r.created_at, reverse=True)


@dataclass
class InMemoryLeaveTypes:
    types: list[LeaveTypeDefinition]

    def list_active(self, company_id: str) -> list[LeaveTypeDefinition]:
        return [t for t in self.types if t.company_id == company_id]


@dataclass
class InMemoryRoster:
    entries: list[RosterEntry]
    department_lookups: int = 0

    def _visible(self, company_id: str) -> list[RosterEntry]:
        return [e for e in self.entries if e.company_id == company_id and not e.is_deleted]

    def find(self, predicate: RosterPredicate) -> list[RosterEntry]:
        if predicate.match_none:
            return []
        rows = []
        for e in self._visible(predicate.company_id):
            if predicate.department_id is not None and e.department_id != predicate.department_id:
                continue
            if predicate.designation_id is not None and e.designation_id != predicate.designation_id:
                continue
            if predicate.employment_status is not None and e.employment_status != predicate.employment_status:
                continue
            if predicate.employment_type is not None and e.employment_type != predicate.employment_type:
                continue
            if predicate.gender is not None and e.gender != predicate.gender:
                continue
            if not predicate.joining_range.contains(e.joining_date):
                continue
            rows.append(e)
        return rows

    def find_ids_in_department(self, *, company_id: str, department_id: str) -> list[str]:
        self.department_lookups += 1
        return [e.employee_ref for e in self._visible(company_id) if e.department_id == department_id]


class FailingRepository:
    """Every read raises, the way a dropped MySQL connection would."""

    def __init__(self, exc: Optional[Exception] = None):
        self.exc = exc or ConnectionError("lost connection to MySQL server during query")

    def find(self, predicate):
        raise self.exc

    def list_active(self, company_id):
        raise self.exc

    def find_ids_in_department(self, *, company_id, department_id):
        raise self.exc


def employee(ref: str, code: str, first: str, last: str, **kw) -> RosterEntry:
    kw.setdefault("company_id", COMPANY)
    kw.setdefault("email", f"{first.lower()}@example.com")
    kw.setdefault("employment_status", "Active")
    kw.setdefault("employment_type", "Full-Time")
    return RosterEntry(employee_ref=ref, employee_code=code, first_name=first, last_name=last, **kw)


def attendance(rid: str, emp: str, day: date, status: AttendanceStatus, hours: float = 0.0, **kw) -> AttendanceRecord:
    kw.setdefault("company_id", COMPANY)
    return AttendanceRecord(record_id=rid, employee_id=emp, work_date=day, status=status, work_hours=hours, **kw)


def leave(
    rid: str,
    emp: str,
    leave_type: Optional[str],
    start: date,
    days: float,
    status: LeaveStatus = LeaveStatus.APPROVED,
    created: Optional[datetime] = None,
    **kw,
) -> LeaveRecord:
    kw.setdefault("company_id", COMPANY)
    return LeaveRecord(
        record_id=rid,
        employee_id=emp,
        leave_type_id=leave_type,
        from_date=start,
        to_date=start,
        number_of_days=days,
        status=status,
        created_at=created or datetime.combine(start, datetime.min.time()),
        leave_code=kw.pop("leave_code", f"LV-{rid}"),
        **kw,
    )


@dataclass
class Store:
    roster: InMemoryRoster
    attendance: InMemoryAttendance
    leaves: InMemoryLeaves
    leave_types: InMemoryLeaveTypes
    extra: dict = field(default_factory=dict)

    def service(self, **kw) -> ReportService:
        return ReportService(self.attendance, self.leaves, self.leave_types, self.roster, **kw)


@pytest.fixture
def store() -> Store:
    roster = InMemoryRoster(
        [
            employee(
                "e1",
                "EMP001",
                "Ana",
                "Lopez",
                department_id="d1",
                department_name="Engineering",
                designation_id="g1",
                designation_title="Developer",
                gender="Female",
                salary=SalaryComponents(basic=5000, hra=1000, allowances=500),
                joining_date=date(2023, 3, 1),
            ),
            employee(
                "e2",
                "EMP002",
                "Ben",
                "Okafor",
                department_id="d1",
                department_name="Engineering",
                designation_id="g2",
                designation_title="Lead",
                gender="Male",
                employment_status="Probation",
                salary=SalaryComponents(basic=4000),
                joining_date=date(2024, 1, 15),
            ),
            employee(
                "e3",
                "EMP003",
                "Chen",
                "Wei",
                department_id="d2",
                department_name="Sales",
                gender="Male",
                employment_type="Part-Time",
                salary=SalaryComponents(basic=3000, hra=250.5),
                joining_date=date(2022, 7, 1),
            ),
            employee("e4", "EMP004", "Dana", "Noor", employment_status="Resigned", email=None),
            employee("e5", "EMP005", "Eve", "Gone", department_id="d2", department_name="Sales", is_deleted=True),
            employee("x1", "OTH001", "Other", "Tenant", company_id=OTHER_COMPANY, department_id="d1",
                     department_name="Engineering"),
        ]
    )
    records = InMemoryAttendance(
        [
            attendance("a1", "e1", date(2025, 1, 6), AttendanceStatus.PRESENT, 9.5, clock_in="09:00", clock_out="18:30"),
            attendance("a2", "e1", date(2025, 1, 7), AttendanceStatus.PRESENT, 8),
            attendance("a3", "e1", date(2025, 1, 8), AttendanceStatus.HALF_DAY, 4),
            attendance("a4", "e2", date(2025, 1, 6), AttendanceStatus.ABSENT),
            attendance("a5", "e2", date(2025, 1, 7), AttendanceStatus.ON_LEAVE),
            attendance("a6", "e3", date(2025, 1, 6), AttendanceStatus.PRESENT, 7.5),
            attendance("a7", "ghost", date(2025, 1, 6), AttendanceStatus.PRESENT, 8),
            attendance("a8", "e1", date(2024, 12, 31), AttendanceStatus.PRESENT, 8),
            attendance("a9", "x1", date(2025, 1, 6), AttendanceStatus.PRESENT, 8, company_id=OTHER_COMPANY),
        ]
    )
    leave_types = InMemoryLeaveTypes(
        [
            LeaveTypeDefinition("lt1", COMPANY, "Annual Leave", "AL", annual_quota=12),
            LeaveTypeDefinition("lt2", COMPANY, "Sick Leave", "SL", annual_quota=6),
            LeaveTypeDefinition("lt9", OTHER_COMPANY, "Other Leave", "OL", annual_quota=30),
        ]
    )
    leaves = InMemoryLeaves(
        [
            leave("l1", "e1", "lt1", date(2025, 2, 3), 3),
            leave("l2", "e1", "lt1", date(2025, 3, 10), 2),
            leave("l3", "e1", "lt1", date(2024, 11, 4), 5),
            leave("l4", "e1", "lt1", date(2025, 2, 20), 1, LeaveStatus.PENDING),
            leave("l5", "e2", "lt2", date(2025, 2, 5), 0.5, LeaveStatus.REJECTED),
            leave("l6", "e3", "missing-type", date(2025, 2, 11), 1),
            leave("l7", "ghost", "lt2", date(2025, 2, 12), 2, LeaveStatus.CANCELLED),
            leave("l8", "x1", "lt9", date(2025, 2, 3), 4, company_id=OTHER_COMPANY),
        ]
    )
    return Store(roster=roster, attendance=records, leaves=leaves, leave_types=leave_types)
