"""Store-level predicates produced by the query filter builder.

Repositories translate these into their own query language (SQL WHERE clauses
for MySQL); in-memory stores call ``matches``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import FrozenSet, Optional

from ..core.enums import SortOrder


class DateField(str, Enum):
    """Which record date a date range constrains."""

    WORK_DATE = "work_date"
    CREATED_AT = "created_at"
    FROM_DATE = "from_date"
    JOINING_DATE = "joining_date"


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day range; either bound may be open."""

    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    @property
    def is_inverted(self) -> bool:
        return self.start is not None and self.end is not None and self.start > self.end

    def contains(self, value: Optional[date]) -> bool:
        if self.is_open:
            return True
        if value is None:
            return False
        if isinstance(value, datetime):
            value = value.date()
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass(frozen=True)
class StorePredicate:
    """Tenant-scoped filter for attendance and leave reads.

    ``employee_ids`` of None means "any employee"; an empty set never reaches
    a store because the builder turns it into ``match_none``.
    """

    company_id: str
    employee_ids: Optional[FrozenSet[str]] = None
    date_range: DateRange = field(default_factory=DateRange)
    date_field: DateField = DateField.WORK_DATE
    status: Optional[str] = None
    leave_type_id: Optional[str] = None
    match_none: bool = False

    @classmethod
    def nothing(cls, company_id: str) -> "StorePredicate":
        return cls(company_id=company_id, match_none=True)

    @property
    def sorted_employee_ids(self) -> list[str]:
        return sorted(self.employee_ids or ())

    def matches(
        self,
        *,
        company_id: str,
        employee_id: Optional[str],
        on_date: Optional[date],
        status: Optional[str] = None,
        leave_type_id: Optional[str] = None,
    ) -> bool:
        if self.match_none or company_id != self.company_id:
            return False
        if self.employee_ids is not None and employee_id not in self.employee_ids:
            return False
        if not self.date_range.contains(on_date):
            return False
        if self.status is not None and status != self.status:
            return False
        if self.leave_type_id is not None and leave_type_id != self.leave_type_id:
            return False
        return True


@dataclass(frozen=True)
class RosterPredicate:
    """Tenant-scoped filter over roster entries (soft-deleted rows excluded)."""

    company_id: str
    department_id: Optional[str] = None
    designation_id: Optional[str] = None
    employment_status: Optional[str] = None
    employment_type: Optional[str] = None
    gender: Optional[str] = None
    joining_range: DateRange = field(default_factory=DateRange)
    sort_by: str = "created_at"
    sort_order: SortOrder = SortOrder.DESC
    match_none: bool = False
