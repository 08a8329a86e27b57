from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ...core.enums import GroupKind
from ...core.exceptions import InvalidDimension
from .base import GroupStrategy
from .strategies.attribute_strategy import AttributeStrategy
from .strategies.date_strategy import DateStrategy
from .strategies.department_strategy import DepartmentStrategy
from .strategies.employee_strategy import EmployeeStrategy
from .strategies.leave_type_strategy import LeaveTypeStrategy
from .strategies.status_strategy import StatusStrategy


def _default_strategies() -> dict[GroupKind, GroupStrategy]:
    strategies: list[GroupStrategy] = [
        DateStrategy(),
        EmployeeStrategy(),
        DepartmentStrategy(),
        LeaveTypeStrategy(),
        StatusStrategy(),
        AttributeStrategy(GroupKind.DESIGNATION, "designation_title", "designation"),
        AttributeStrategy(GroupKind.GENDER, "gender", "gender"),
        AttributeStrategy(GroupKind.EMPLOYMENT_TYPE, "employment_type", "employmentType"),
    ]
    return {s.kind: s for s in strategies}


@dataclass
class GroupStrategyFactory:
    """Factory Pattern: one strategy instance per GroupKind."""

    strategies: dict[GroupKind, GroupStrategy] = field(default_factory=_default_strategies)

    def for_kind(self, kind: GroupKind) -> GroupStrategy:
        try:
            return self.strategies[kind]
        except KeyError as exc:
            raise InvalidDimension(str(kind.value), [k.value for k in self.strategies]) from exc

    @staticmethod
    def parse(value: Optional[str], *, allowed: Iterable[GroupKind], default: GroupKind) -> GroupKind:
        """Map a caller's groupBy string onto an allowed GroupKind.

        Unknown or disallowed values are rejected rather than grouped to nothing.
        """
        allowed = tuple(allowed)
        if value is None:
            return default
        for kind in allowed:
            if kind.value == value:
                return kind
        raise InvalidDimension(value, [k.value for k in allowed])
