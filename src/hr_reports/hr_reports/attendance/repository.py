from __future__ import annotations

from typing import Protocol, Sequence

from ..reports.predicates import StorePredicate
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def find(self, predicate: StorePredicate) -> Sequence[AttendanceRecord]:
        """Attendance rows matching the predicate, newest date first."""

        raise NotImplementedError
