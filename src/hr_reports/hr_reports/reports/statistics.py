"""Derived report metrics.

All helpers work on unrounded floats. Roll-ups consume the unrounded
per-employee values; ``to_fixed`` is applied once, when a result is rendered.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Sequence

from ..core.constants import DISPLAY_DECIMALS, HALF_DAY_WEIGHT, STANDARD_WORK_HOURS
from ..core.enums import AttendanceStatus, LeaveStatus

if TYPE_CHECKING:
    from ..leaves.model import LeaveRecord, LeaveTypeDefinition
    from .joiner import JoinedAttendance, JoinedEmployee


def to_fixed(value: Optional[float], places: int = DISPLAY_DECIMALS) -> float:
    """Round for display; NaN, infinity and None render as 0."""
    if value is None:
        return 0.0
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return round(value, places)


def safe_average(total: float, count: int) -> float:
    if not count:
        return 0.0
    return total / count


def mean(values: Sequence[float]) -> float:
    return safe_average(sum(values), len(values))


def attendance_percentage(present: int, absent: int, half_day: int) -> float:
    """100 * (present + 0.5 * halfDay) / (present + absent + halfDay); leave days excluded."""
    working_days = present + absent + half_day
    if working_days == 0:
        return 0.0
    return 100.0 * (present + HALF_DAY_WEIGHT * half_day) / working_days


def overtime_hours(work_hours: float, baseline: float = STANDARD_WORK_HOURS) -> float:
    return max(0.0, (work_hours or 0.0) - baseline)


@dataclass
class AttendanceTally:
    """Status counts and hour totals over a set of attendance records."""

    present: int = 0
    absent: int = 0
    half_day: int = 0
    leave: int = 0
    total_work_hours: float = 0.0
    total_overtime: float = 0.0

    def add(self, status: AttendanceStatus, work_hours: float, *, baseline: float = STANDARD_WORK_HOURS) -> None:
        if status is AttendanceStatus.PRESENT:
            self.present += 1
        elif status is AttendanceStatus.ABSENT:
            self.absent += 1
        elif status is AttendanceStatus.HALF_DAY:
            self.half_day += 1
        elif status is AttendanceStatus.ON_LEAVE:
            self.leave += 1
        self.total_work_hours += work_hours or 0.0
        self.total_overtime += overtime_hours(work_hours, baseline)

    def merge(self, other: "AttendanceTally") -> "AttendanceTally":
        return AttendanceTally(
            present=self.present + other.present,
            absent=self.absent + other.absent,
            half_day=self.half_day + other.half_day,
            leave=self.leave + other.leave,
            total_work_hours=self.total_work_hours + other.total_work_hours,
            total_overtime=self.total_overtime + other.total_overtime,
        )

    @property
    def total_days(self) -> int:
        return self.present + self.absent + self.half_day + self.leave

    @property
    def working_days(self) -> int:
        return self.present + self.absent + self.half_day

    @property
    def attendance_percentage(self) -> float:
        return attendance_percentage(self.present, self.absent, self.half_day)

    @property
    def avg_work_hours(self) -> float:
        return safe_average(self.total_work_hours, self.total_days)


@dataclass
class LeaveTally:
    total: int = 0
    by_status: dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in LeaveStatus})
    total_days: float = 0.0
    approved_days: float = 0.0

    def add(self, status: LeaveStatus, days: float) -> None:
        self.total += 1
        self.by_status[status.value] = self.by_status.get(status.value, 0) + 1
        self.total_days += days or 0.0
        if status is LeaveStatus.APPROVED:
            self.approved_days += days or 0.0

    def count(self, status: LeaveStatus) -> int:
        return self.by_status.get(status.value, 0)


@dataclass(frozen=True)
class EmployeeAttendance:
    """Per-employee attendance metrics for a period."""

    employee_key: str
    employee_code: str
    name: str
    department: str
    tally: AttendanceTally

    def to_dict(self) -> dict[str, Any]:
        t = self.tally
        return {
            "employeeId": self.employee_code,
            "name": self.name,
            "department": self.department,
            "totalDays": t.total_days,
            "present": t.present,
            "absent": t.absent,
            "halfDay": t.half_day,
            "leave": t.leave,
            "totalWorkHours": to_fixed(t.total_work_hours),
            "avgWorkHours": to_fixed(t.avg_work_hours),
            "totalOvertime": to_fixed(t.total_overtime),
            "attendancePercentage": to_fixed(t.attendance_percentage),
        }


@dataclass
class AttendanceRollup:
    """Roll-up over per-employee metrics (a department or the whole company)."""

    label: str
    percentages: list[float] = field(default_factory=list)
    tally: AttendanceTally = field(default_factory=AttendanceTally)

    def add(self, employee: EmployeeAttendance) -> None:
        self.percentages.append(employee.tally.attendance_percentage)
        self.tally = self.tally.merge(employee.tally)

    @property
    def total_employees(self) -> int:
        return len(self.percentages)

    @property
    def avg_attendance_percentage(self) -> float:
        """Arithmetic mean of the per-employee percentages (not re-weighted by days)."""
        return mean(self.percentages)

    def to_dict(self) -> dict[str, Any]:
        return {
            "department": self.label,
            "totalEmployees": self.total_employees,
            "avgAttendancePercentage": to_fixed(self.avg_attendance_percentage),
            "totalPresent": self.tally.present,
            "totalAbsent": self.tally.absent,
            "totalHalfDay": self.tally.half_day,
            "totalLeave": self.tally.leave,
            "totalWorkHours": to_fixed(self.tally.total_work_hours),
            "totalOvertime": to_fixed(self.tally.total_overtime),
        }


@dataclass(frozen=True)
class LeaveBalance:
    leave_type_id: str
    name: str
    code: str
    annual_quota: float
    used: float
    is_paid: bool

    @property
    def balance(self) -> float:
        return leave_balance(self.annual_quota, self.used)

    def to_dict(self) -> dict[str, Any]:
        return {
            "leaveType": self.name,
            "code": self.code,
            "annualQuota": to_fixed(self.annual_quota),
            "used": to_fixed(self.used),
            "balance": to_fixed(self.balance),
            "isPaid": self.is_paid,
        }


def used_leave_days(
    leaves: Iterable["LeaveRecord"],
    *,
    employee_id: str,
    leave_type_id: str,
    year: int,
) -> float:
    """Approved days of one employee/type whose from-date falls in ``year``."""
    return sum(
        leave.number_of_days or 0.0
        for leave in leaves
        if leave.employee_id == employee_id
        and leave.leave_type_id == leave_type_id
        and leave.status is LeaveStatus.APPROVED
        and leave.from_date.year == year
    )


def leave_balance(annual_quota: float, used: float) -> float:
    return (annual_quota or 0.0) - used


class StatisticsCalculator:
    """Per-entity metrics and roll-ups shared by every report facade."""

    def __init__(self, *, standard_work_hours: float = STANDARD_WORK_HOURS):
        self._baseline = float(standard_work_hours)

    def attendance_tally(self, records: Iterable["JoinedAttendance"]) -> AttendanceTally:
        tally = AttendanceTally()
        for r in records:
            tally.add(r.record.status, r.record.work_hours, baseline=self._baseline)
        return tally

    def leave_tally(self, records: Iterable[Any]) -> LeaveTally:
        tally = LeaveTally()
        for r in records:
            leave = getattr(r, "record", r)
            tally.add(leave.status, leave.number_of_days)
        return tally

    def employee_attendance(
        self,
        employees: Iterable["JoinedEmployee"],
        attendance_by_employee: Mapping[str, Sequence["JoinedAttendance"]],
    ) -> list[EmployeeAttendance]:
        """One summary per roster employee, in roster order.

        ``attendance_by_employee`` is keyed by roster id (an employee partition
        from the grouping engine); employees without rows get zeros.
        """
        return [
            EmployeeAttendance(
                employee_key=e.entry.employee_ref,
                employee_code=e.employee.code,
                name=e.employee.name,
                department=e.employee.department_name,
                tally=self.attendance_tally(attendance_by_employee.get(e.entry.employee_ref, ())),
            )
            for e in employees
        ]

    def department_rollups(self, summaries: Iterable[EmployeeAttendance]) -> list[AttendanceRollup]:
        rollups: dict[str, AttendanceRollup] = {}
        for s in summaries:
            rollup = rollups.get(s.department)
            if rollup is None:
                rollup = rollups[s.department] = AttendanceRollup(label=s.department)
            rollup.add(s)
        return list(rollups.values())

    def company_rollup(self, summaries: Iterable[EmployeeAttendance]) -> AttendanceRollup:
        rollup = AttendanceRollup(label="company")
        for s in summaries:
            rollup.add(s)
        return rollup

    def leave_balances(
        self,
        *,
        employee_id: str,
        leave_types: Sequence["LeaveTypeDefinition"],
        approved_leaves: Sequence["LeaveRecord"],
        year: int,
    ) -> list[LeaveBalance]:
        return [
            LeaveBalance(
                leave_type_id=t.leave_type_id,
                name=t.name,
                code=t.code,
                annual_quota=t.annual_quota or 0.0,
                used=used_leave_days(
                    approved_leaves,
                    employee_id=employee_id,
                    leave_type_id=t.leave_type_id,
                    year=year,
                ),
                is_paid=t.is_paid,
            )
            for t in leave_types
        ]

    def leave_type_stats(
        self,
        leave_types: Sequence["LeaveTypeDefinition"],
        balances_per_employee: Sequence[Sequence[LeaveBalance]],
    ) -> list[dict[str, Any]]:
        stats = []
        employees = len(balances_per_employee)
        for t in leave_types:
            rows = [b for balances in balances_per_employee for b in balances if b.leave_type_id == t.leave_type_id]
            total_quota = sum(b.annual_quota for b in rows)
            total_used = sum(b.used for b in rows)
            stats.append(
                {
                    "leaveType": t.name,
                    "code": t.code,
                    "totalQuota": to_fixed(total_quota),
                    "totalUsed": to_fixed(total_used),
                    "totalBalance": to_fixed(total_quota - total_used),
                    "avgUsedPerEmployee": to_fixed(safe_average(total_used, employees)),
                }
            )
        return stats
