from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Protocol

from ...core.enums import GroupKind


class Groupable(Protocol):
    """What the engine needs from a joined record; strategies read further attributes."""

    @property
    def category(self) -> str: ...

    @property
    def measure(self) -> float: ...


@dataclass(frozen=True)
class RecordProfile:
    """Accumulator shape for one record family.

    ``buckets`` are category counters present (zeroed) on every group so group
    records keep a constant shape; ``count_field`` and ``measure_field`` name
    the record count and the running sum of the numeric measure. The sum is
    emitted unrounded so group records add up to the report summary.
    """

    buckets: tuple[str, ...]
    count_field: str
    measure_field: str


ATTENDANCE_PROFILE = RecordProfile(
    buckets=("present", "absent", "halfDay", "leave"),
    count_field="totalDays",
    measure_field="totalWorkHours",
)
LEAVE_PROFILE = RecordProfile(
    buckets=("approved", "pending", "rejected", "cancelled"),
    count_field="count",
    measure_field="totalDays",
)
ROSTER_PROFILE = RecordProfile(buckets=(), count_field="count", measure_field="totalSalary")


@dataclass
class GroupAccumulator:
    """Mutable running totals for one group."""

    key: str
    labels: dict[str, Any]
    profile: RecordProfile
    count: int = 0
    total: float = 0.0
    buckets: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in self.profile.buckets:
            self.buckets.setdefault(name, 0)

    def add(self, record: Groupable) -> None:
        self.count += 1
        self.total += record.measure or 0.0
        self.buckets[record.category] = self.buckets.get(record.category, 0) + 1

    def merge(self, other: "GroupAccumulator") -> "GroupAccumulator":
        """Combine two partial accumulators for the same key."""
        if other.key != self.key:
            raise ValueError(f"Cannot merge group '{other.key}' into '{self.key}'")
        merged = GroupAccumulator(key=self.key, labels=dict(self.labels), profile=self.profile)
        merged.count = self.count + other.count
        merged.total = self.total + other.total
        for source in (self.buckets, other.buckets):
            for name, value in source.items():
                merged.buckets[name] = merged.buckets.get(name, 0) + value
        return merged

    def bucket(self, name: str) -> int:
        return self.buckets.get(name, 0)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.labels)
        out.update(self.buckets)
        out[self.profile.count_field] = self.count
        out[self.profile.measure_field] = self.total
        return out


class GroupStrategy(ABC):
    """Strategy Pattern: how one dimension keys and labels a record."""

    kind: GroupKind

    @abstractmethod
    def key(self, record: Any) -> str:
        raise NotImplementedError

    @abstractmethod
    def labels(self, record: Any) -> dict[str, Any]:
        raise NotImplementedError
