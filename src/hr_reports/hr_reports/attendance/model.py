from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    record_id: str
    company_id: str
    employee_id: str
    work_date: date
    status: AttendanceStatus
    work_hours: float = 0.0
    clock_in: Optional[str] = None
    clock_out: Optional[str] = None
