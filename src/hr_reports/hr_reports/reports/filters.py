from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, FrozenSet, Mapping, Optional

from ..common.datetime_utils import month_bounds, now_local, parse_optional_date
from ..core.enums import SortOrder
from ..core.exceptions import DomainError, StoreUnavailable, ValidationError
from ..employees.repository import RosterRepository
from .predicates import DateField, DateRange, RosterPredicate, StorePredicate

logger = logging.getLogger(__name__)

# Query-string sort names accepted by the employee report.
ROSTER_SORT_FIELDS = {
    "createdAt": "created_at",
    "joiningDate": "joining_date",
    "employeeId": "employee_code",
    "firstName": "first_name",
    "lastName": "last_name",
    "status": "employment_status",
}


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_int(value: Optional[str], field_name: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ValidationError(f"{field_name} must be an integer") from exc


@dataclass(frozen=True)
class ReportFilter:
    """Caller filter for one report invocation.

    ``company_id`` always comes from the authenticated session; ``from_params``
    never reads it from the query mapping.
    """

    company_id: str
    employee_id: Optional[str] = None
    department_id: Optional[str] = None
    designation_id: Optional[str] = None
    leave_type_id: Optional[str] = None
    status: Optional[str] = None
    employment_type: Optional[str] = None
    gender: Optional[str] = None
    date_range: DateRange = field(default_factory=DateRange)
    group_by: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None
    sort_by: str = "createdAt"
    sort_order: SortOrder = SortOrder.DESC

    @classmethod
    def from_params(cls, company_id: str, params: Mapping[str, Any]) -> "ReportFilter":
        if not company_id:
            raise ValidationError("company id is required")

        month = _parse_int(_clean(params.get("month")), "month")
        if month is not None and not 1 <= month <= 12:
            raise ValidationError("month must be between 1 and 12")
        year = _parse_int(_clean(params.get("year")), "year")
        if year is not None and not 1 <= year <= 9999:
            raise ValidationError("year is out of range")

        sort_by = _clean(params.get("sortBy")) or "createdAt"
        if sort_by not in ROSTER_SORT_FIELDS:
            raise ValidationError(f"Unsupported sortBy '{sort_by}'")
        order = (_clean(params.get("sortOrder")) or SortOrder.DESC.value).lower()
        try:
            sort_order = SortOrder(order)
        except ValueError as exc:
            raise ValidationError("sortOrder must be 'asc' or 'desc'") from exc

        return cls(
            company_id=str(company_id),
            employee_id=_clean(params.get("employeeId")),
            department_id=_clean(params.get("department")),
            designation_id=_clean(params.get("designation")),
            leave_type_id=_clean(params.get("leaveType")),
            status=_clean(params.get("status")),
            employment_type=_clean(params.get("employmentType")),
            gender=_clean(params.get("gender")),
            date_range=DateRange(
                start=parse_optional_date(_clean(params.get("startDate"))),
                end=parse_optional_date(_clean(params.get("endDate"))),
            ),
            group_by=_clean(params.get("groupBy")),
            month=month,
            year=year,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    def period(self, *, today: Optional[date] = None) -> tuple[int, int]:
        """(year, month) for monthly reports, defaulting to the current month."""
        today = today or now_local().date()
        return (self.year or today.year, self.month or today.month)

    def month_range(self, *, today: Optional[date] = None) -> DateRange:
        year, month = self.period(today=today)
        start, end = month_bounds(year, month)
        return DateRange(start=start, end=end)


class QueryFilterBuilder:
    """Turns a ReportFilter into store predicates.

    Department filters are resolved to an explicit employee-id set through the
    roster; an explicit employee id wins and skips that lookup.
    """

    def __init__(self, roster: RosterRepository):
        self._roster = roster

    def employee_scope(self, report_filter: ReportFilter) -> Optional[FrozenSet[str]]:
        """None means unconstrained; an empty set means nobody matches."""
        if report_filter.employee_id:
            return frozenset({report_filter.employee_id})
        if report_filter.department_id:
            try:
                ids = self._roster.find_ids_in_department(
                    company_id=report_filter.company_id,
                    department_id=report_filter.department_id,
                )
            except DomainError:
                raise
            except Exception as exc:
                logger.error(
                    "Department lookup failed for company %s: %s",
                    report_filter.company_id,
                    exc,
                    extra={"company_id": report_filter.company_id},
                )
                raise StoreUnavailable(detail=str(exc)) from exc
            if not ids:
                logger.debug(
                    "Department %s has no employees for company %s",
                    report_filter.department_id,
                    report_filter.company_id,
                )
            return frozenset(ids)
        return None

    def attendance_predicate(self, report_filter: ReportFilter) -> StorePredicate:
        return self._predicate(
            report_filter,
            date_field=DateField.WORK_DATE,
            date_range=None,
            status=report_filter.status,
            scoped=True,
        )

    def leave_predicate(
        self,
        report_filter: ReportFilter,
        *,
        date_field: DateField = DateField.CREATED_AT,
        date_range: Optional[DateRange] = None,
        scoped: bool = True,
    ) -> StorePredicate:
        return self._predicate(
            report_filter,
            date_field=date_field,
            date_range=date_range,
            status=report_filter.status if scoped else None,
            leave_type_id=report_filter.leave_type_id if scoped else None,
            scoped=scoped,
        )

    def department_predicate(
        self,
        report_filter: ReportFilter,
        *,
        date_field: DateField = DateField.WORK_DATE,
        date_range: Optional[DateRange] = None,
    ) -> StorePredicate:
        """Tenant, date range and department only; status and employee id are ignored."""
        return self._predicate(
            replace(report_filter, employee_id=None),
            date_field=date_field,
            date_range=date_range,
            status=None,
            scoped=bool(report_filter.department_id),
        )

    def roster_predicate(self, report_filter: ReportFilter, *, scoped: bool = True) -> RosterPredicate:
        """Roster filter; ``scoped=False`` keeps only tenant and department."""
        if not scoped:
            return RosterPredicate(
                company_id=report_filter.company_id,
                department_id=report_filter.department_id,
            )

        joining_range = report_filter.date_range
        return RosterPredicate(
            company_id=report_filter.company_id,
            department_id=report_filter.department_id,
            designation_id=report_filter.designation_id,
            employment_status=report_filter.status,
            employment_type=report_filter.employment_type,
            gender=report_filter.gender,
            joining_range=joining_range,
            sort_by=ROSTER_SORT_FIELDS[report_filter.sort_by],
            sort_order=report_filter.sort_order,
            match_none=joining_range.is_inverted,
        )

    def _predicate(
        self,
        report_filter: ReportFilter,
        *,
        date_field: DateField,
        date_range: Optional[DateRange],
        status: Optional[str],
        scoped: bool,
        leave_type_id: Optional[str] = None,
    ) -> StorePredicate:
        company_id = report_filter.company_id
        date_range = date_range if date_range is not None else report_filter.date_range

        if date_range.is_inverted:
            return StorePredicate.nothing(company_id)

        employee_ids = self.employee_scope(report_filter) if scoped else None
        if employee_ids is not None and not employee_ids:
            return StorePredicate.nothing(company_id)

        return StorePredicate(
            company_id=company_id,
            employee_ids=employee_ids,
            date_range=date_range,
            date_field=date_field,
            status=status,
            leave_type_id=leave_type_id,
        )
