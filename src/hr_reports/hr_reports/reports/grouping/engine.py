from __future__ import annotations

from typing import Iterable, Optional

from ...core.enums import GroupKind
from .base import GroupAccumulator, Groupable, RecordProfile
from .factory import GroupStrategyFactory


class GroupingEngine:
    """Single-pass partitioning of joined records.

    Groups come back in first-seen key order. The engine knows nothing about
    individual dimensions; it asks the factory for the strategy of ``kind``.
    """

    def __init__(self, factory: Optional[GroupStrategyFactory] = None):
        self._factory = factory or GroupStrategyFactory()

    def group(self, records: Iterable[Groupable], kind: GroupKind, profile: RecordProfile) -> list[GroupAccumulator]:
        strategy = self._factory.for_kind(kind)
        groups: dict[str, GroupAccumulator] = {}

        for record in records:
            key = strategy.key(record)
            acc = groups.get(key)
            if acc is None:
                acc = GroupAccumulator(key=key, labels=strategy.labels(record), profile=profile)
                groups[key] = acc
            acc.add(record)

        return list(groups.values())

    def group_dicts(self, records: Iterable[Groupable], kind: GroupKind, profile: RecordProfile) -> list[dict]:
        return [acc.to_dict() for acc in self.group(records, kind, profile)]

    def partition(self, records: Iterable[Groupable], kind: GroupKind) -> dict[str, list]:
        """Records per group key, keys in first-seen order."""
        strategy = self._factory.for_kind(kind)
        parts: dict[str, list] = {}
        for record in records:
            parts.setdefault(strategy.key(record), []).append(record)
        return parts
