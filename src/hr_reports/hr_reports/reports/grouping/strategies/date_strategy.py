from __future__ import annotations

from typing import Any

from ....common.datetime_utils import format_date
from ....core.constants import UNKNOWN_NAME
from ....core.enums import GroupKind
from ..base import GroupStrategy


class DateStrategy(GroupStrategy):
    """One group per calendar day (attendance date, leave start, joining date)."""

    kind = GroupKind.DATE

    def key(self, record: Any) -> str:
        return format_date(getattr(record, "group_date", None)) or UNKNOWN_NAME

    def labels(self, record: Any) -> dict[str, Any]:
        return {"date": self.key(record)}
