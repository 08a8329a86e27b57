from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveTypeDefinition:
    leave_type_id: str
    company_id: str
    name: str
    code: str
    annual_quota: float = 0.0
    is_paid: bool = True


@dataclass(frozen=True)
class LeaveRecord:
    """Domain entity: a leave request for a date span."""

    record_id: str
    company_id: str
    employee_id: str
    leave_type_id: Optional[str]
    from_date: date
    to_date: date
    number_of_days: float
    status: LeaveStatus
    created_at: datetime
    leave_code: Optional[str] = None
    reason: Optional[str] = None
