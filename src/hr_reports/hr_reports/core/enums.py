from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status values as stored per employee per day."""

    PRESENT = "Present"
    ABSENT = "Absent"
    HALF_DAY = "Half Day"
    ON_LEAVE = "On Leave"

    @property
    def bucket(self) -> str:
        """Counter name used in summaries and group records."""
        return {
            AttendanceStatus.PRESENT: "present",
            AttendanceStatus.ABSENT: "absent",
            AttendanceStatus.HALF_DAY: "halfDay",
            AttendanceStatus.ON_LEAVE: "leave",
        }[self]


class LeaveStatus(str, Enum):
    """Approval state of a leave request."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"

    @property
    def bucket(self) -> str:
        return self.value.lower()


class EmploymentStatus(str, Enum):
    ACTIVE = "Active"
    PROBATION = "Probation"
    RESIGNED = "Resigned"
    TERMINATED = "Terminated"
    ON_NOTICE = "On Notice"


class GroupKind(str, Enum):
    """Dimensions a record set can be partitioned along."""

    DATE = "date"
    EMPLOYEE = "employee"
    DEPARTMENT = "department"
    LEAVE_TYPE = "leaveType"
    STATUS = "status"
    DESIGNATION = "designation"
    GENDER = "gender"
    EMPLOYMENT_TYPE = "employmentType"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
