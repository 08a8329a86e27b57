from __future__ import annotations

from typing import Any

from ....core.enums import GroupKind
from ..base import GroupStrategy


class EmployeeStrategy(GroupStrategy):
    """Unknown employees share the sentinel key and collapse into one group."""

    kind = GroupKind.EMPLOYEE

    def key(self, record: Any) -> str:
        return record.employee.key

    def labels(self, record: Any) -> dict[str, Any]:
        return {"employeeId": record.employee.code, "name": record.employee.name}
