from __future__ import annotations

from typing import Protocol, Sequence

from ..reports.predicates import StorePredicate
from .model import LeaveRecord, LeaveTypeDefinition


class LeaveRepository(Protocol):
    def find(self, predicate: StorePredicate) -> Sequence[LeaveRecord]:
        """Leave rows matching the predicate, newest creation first."""

        raise NotImplementedError


class LeaveTypeRepository(Protocol):
    def list_active(self, company_id: str) -> Sequence[LeaveTypeDefinition]:
        raise NotImplementedError
