from __future__ import annotations

from typing import Any

from ....core.enums import GroupKind
from ..base import GroupStrategy


class DepartmentStrategy(GroupStrategy):
    kind = GroupKind.DEPARTMENT

    def key(self, record: Any) -> str:
        return record.employee.department_key

    def labels(self, record: Any) -> dict[str, Any]:
        return {"department": record.employee.department_name}
