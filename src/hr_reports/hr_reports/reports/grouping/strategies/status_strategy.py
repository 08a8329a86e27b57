from __future__ import annotations

from typing import Any

from ....core.enums import GroupKind
from ..base import GroupStrategy


class StatusStrategy(GroupStrategy):
    kind = GroupKind.STATUS

    def key(self, record: Any) -> str:
        return record.status_label

    def labels(self, record: Any) -> dict[str, Any]:
        return {"status": record.status_label}
