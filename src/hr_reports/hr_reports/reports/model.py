from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class ReportResult:
    """One report invocation's output.

    ``sections`` carries report-specific named blocks (period, roll-ups,
    distributions) next to the common summary / groupedData / rawRecords.
    """

    summary: dict[str, Any]
    group_by: Optional[str]
    grouped_data: list[dict[str, Any]]
    raw_records: list[dict[str, Any]]
    sections: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "summary": self.summary,
            "groupBy": self.group_by,
            "groupedData": self.grouped_data,
            "rawRecords": self.raw_records,
        }
        out.update(self.sections)
        return out
