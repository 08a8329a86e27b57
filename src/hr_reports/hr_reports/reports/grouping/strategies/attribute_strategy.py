from __future__ import annotations

from typing import Any

from ....core.enums import GroupKind
from ..base import GroupStrategy


class AttributeStrategy(GroupStrategy):
    """Groups roster rows on a plain display attribute (designation, gender, ...).

    The joiner already substituted sentinels, so the attribute is always set.
    """

    def __init__(self, kind: GroupKind, attribute: str, label_field: str):
        self.kind = kind
        self._attribute = attribute
        self._label_field = label_field

    def key(self, record: Any) -> str:
        return str(getattr(record, self._attribute))

    def labels(self, record: Any) -> dict[str, Any]:
        return {self._label_field: self.key(record)}
