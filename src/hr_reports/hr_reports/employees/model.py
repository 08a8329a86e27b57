from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class SalaryComponents:
    basic: float = 0.0
    hra: float = 0.0
    allowances: float = 0.0

    @property
    def total(self) -> float:
        return self.basic + self.hra + self.allowances


@dataclass(frozen=True)
class RosterEntry:
    """Denormalized employee row: employee plus department/designation display fields."""

    employee_ref: str
    company_id: str
    employee_code: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    department_id: Optional[str] = None
    department_name: Optional[str] = None
    designation_id: Optional[str] = None
    designation_title: Optional[str] = None
    employment_status: Optional[str] = None
    employment_type: Optional[str] = None
    gender: Optional[str] = None
    salary: SalaryComponents = field(default_factory=SalaryComponents)
    joining_date: Optional[date] = None
    created_at: Optional[datetime] = None
    is_deleted: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
