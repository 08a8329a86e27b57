from __future__ import annotations

from typing import Any

from ....core.constants import MISSING_CODE, UNKNOWN_KEY, UNKNOWN_NAME
from ....core.enums import GroupKind
from ..base import GroupStrategy


class LeaveTypeStrategy(GroupStrategy):
    kind = GroupKind.LEAVE_TYPE

    def key(self, record: Any) -> str:
        return getattr(record, "leave_type_key", UNKNOWN_KEY)

    def labels(self, record: Any) -> dict[str, Any]:
        return {
            "leaveType": getattr(record, "leave_type_name", UNKNOWN_NAME),
            "code": getattr(record, "leave_type_code", MISSING_CODE),
        }
