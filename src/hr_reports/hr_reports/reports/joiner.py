from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import format_date
from ..core.constants import (
    MISSING_CODE,
    NOT_SPECIFIED,
    UNASSIGNED_KEY,
    UNASSIGNED_LABEL,
    UNKNOWN_KEY,
    UNKNOWN_NAME,
)
from ..employees.model import RosterEntry
from ..leaves.model import LeaveRecord, LeaveTypeDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmployeeRef:
    """Display fields of the employee a record points at (sentinels when missing)."""

    key: str
    code: str
    name: str
    email: str
    department_key: str
    department_name: str

    @classmethod
    def missing(cls) -> "EmployeeRef":
        return cls(
            key=UNKNOWN_KEY,
            code=MISSING_CODE,
            name=UNKNOWN_NAME,
            email=MISSING_CODE,
            department_key=UNASSIGNED_KEY,
            department_name=UNASSIGNED_LABEL,
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.key, "employeeId": self.code, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class JoinedAttendance:
    record: AttendanceRecord
    employee: EmployeeRef

    # Grouping view
    @property
    def category(self) -> str:
        return self.record.status.bucket

    @property
    def measure(self) -> float:
        return self.record.work_hours

    @property
    def group_date(self) -> date:
        return self.record.work_date

    @property
    def status_label(self) -> str:
        return self.record.status.value

    def to_dict(self) -> dict[str, Any]:
        r = self.record
        return {
            "id": r.record_id,
            "date": format_date(r.work_date),
            "status": r.status.value,
            "workHours": r.work_hours,
            "clockIn": r.clock_in,
            "clockOut": r.clock_out,
            "employee": self.employee.to_dict(),
            "department": {"id": self.employee.department_key, "name": self.employee.department_name},
        }


@dataclass(frozen=True)
class JoinedLeave:
    record: LeaveRecord
    employee: EmployeeRef
    leave_type_key: str
    leave_type_name: str
    leave_type_code: str
    is_paid: Optional[bool]

    @property
    def category(self) -> str:
        return self.record.status.bucket

    @property
    def measure(self) -> float:
        return self.record.number_of_days

    @property
    def group_date(self) -> date:
        return self.record.from_date

    @property
    def status_label(self) -> str:
        return self.record.status.value

    def to_dict(self) -> dict[str, Any]:
        r = self.record
        return {
            "id": r.record_id,
            "leaveId": r.leave_code,
            "fromDate": format_date(r.from_date),
            "toDate": format_date(r.to_date),
            "numberOfDays": r.number_of_days,
            "reason": r.reason,
            "status": r.status.value,
            "createdAt": r.created_at.isoformat() if r.created_at else None,
            "employee": self.employee.to_dict(),
            "department": {"id": self.employee.department_key, "name": self.employee.department_name},
            "leaveType": {
                "id": self.leave_type_key,
                "name": self.leave_type_name,
                "code": self.leave_type_code,
                "isPaid": self.is_paid,
            },
        }


@dataclass(frozen=True)
class JoinedEmployee:
    entry: RosterEntry
    employee: EmployeeRef
    designation_title: str
    gender: str
    employment_type: str

    @property
    def category(self) -> str:
        return self.entry.employment_status or UNKNOWN_NAME

    @property
    def measure(self) -> float:
        return self.entry.salary.total

    @property
    def group_date(self) -> Optional[date]:
        return self.entry.joining_date

    @property
    def status_label(self) -> str:
        return self.category

    def to_dict(self) -> dict[str, Any]:
        e = self.entry
        return {
            "id": e.employee_ref,
            "employeeId": e.employee_code,
            "firstName": e.first_name,
            "lastName": e.last_name,
            "name": e.full_name,
            "email": e.email,
            "department": {"id": self.employee.department_key, "name": self.employee.department_name},
            "designation": self.designation_title,
            "employmentStatus": e.employment_status,
            "employmentType": e.employment_type,
            "gender": e.gender,
            "joiningDate": format_date(e.joining_date),
            "salary": {
                "basic": e.salary.basic,
                "hra": e.salary.hra,
                "allowances": e.salary.allowances,
                "total": e.salary.total,
            },
        }


class Joiner:
    """Attaches reference display fields to primary records.

    Lookups are built once from pre-fetched roster and leave-type collections.
    A reference that is missing, soft-deleted or owned by another tenant is
    replaced by sentinels so a single orphaned record never aborts a report.
    """

    def __init__(
        self,
        company_id: str,
        roster: Iterable[RosterEntry] = (),
        leave_types: Iterable[LeaveTypeDefinition] = (),
    ):
        self._company_id = company_id
        self._employees = {
            e.employee_ref: e for e in roster if e.company_id == company_id and not e.is_deleted
        }
        self._leave_types = {t.leave_type_id: t for t in leave_types if t.company_id == company_id}

    def employee_ref(self, employee_id: Optional[str]) -> EmployeeRef:
        entry = self._employees.get(employee_id) if employee_id else None
        if entry is None:
            logger.debug("Dangling employee reference %r (company %s)", employee_id, self._company_id)
            return EmployeeRef.missing()
        return self._ref_for(entry)

    def join_attendance(self, records: Iterable[AttendanceRecord]) -> list[JoinedAttendance]:
        return [JoinedAttendance(record=r, employee=self.employee_ref(r.employee_id)) for r in records]

    def join_leaves(self, records: Iterable[LeaveRecord]) -> list[JoinedLeave]:
        joined = []
        for r in records:
            leave_type = self._leave_types.get(r.leave_type_id) if r.leave_type_id else None
            if leave_type is None:
                logger.debug("Dangling leave type reference %r (company %s)", r.leave_type_id, self._company_id)
            joined.append(
                JoinedLeave(
                    record=r,
                    employee=self.employee_ref(r.employee_id),
                    leave_type_key=leave_type.leave_type_id if leave_type else UNKNOWN_KEY,
                    leave_type_name=leave_type.name if leave_type else UNKNOWN_NAME,
                    leave_type_code=leave_type.code if leave_type else MISSING_CODE,
                    is_paid=leave_type.is_paid if leave_type else None,
                )
            )
        return joined

    def join_roster(self, entries: Iterable[RosterEntry]) -> list[JoinedEmployee]:
        return [
            JoinedEmployee(
                entry=e,
                employee=self._ref_for(e),
                designation_title=e.designation_title or UNASSIGNED_LABEL,
                gender=e.gender or NOT_SPECIFIED,
                employment_type=e.employment_type or UNKNOWN_NAME,
            )
            for e in entries
        ]

    @staticmethod
    def _ref_for(entry: RosterEntry) -> EmployeeRef:
        has_department = bool(entry.department_id and entry.department_name)
        return EmployeeRef(
            key=entry.employee_ref,
            code=entry.employee_code or MISSING_CODE,
            name=entry.full_name or UNKNOWN_NAME,
            email=entry.email or MISSING_CODE,
            department_key=entry.department_id if has_department else UNASSIGNED_KEY,
            department_name=entry.department_name if has_department else UNASSIGNED_LABEL,
        )
