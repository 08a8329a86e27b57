from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import MISSING_CODE

ATTENDANCE_EXPORT_HEADER = (
    "Date",
    "Employee ID",
    "Employee Name",
    "Email",
    "Clock In",
    "Clock Out",
    "Work Hours",
    "Status",
)

LEAVE_EXPORT_HEADER = (
    "Leave ID",
    "Employee ID",
    "Employee Name",
    "Leave Type",
    "From Date",
    "To Date",
    "Number of Days",
    "Reason",
    "Status",
    "Applied On",
)

EMPLOYEE_EXPORT_HEADER = (
    "Employee ID",
    "Name",
    "Email",
    "Department",
    "Designation",
    "Status",
    "Joining Date",
    "Basic Salary",
    "HRA",
    "Allowances",
    "Total Salary",
)

_LINE_TERMINATOR = "\n"


@dataclass(frozen=True)
class ExportFile:
    content: bytes
    filename: str
    row_count: int = 0
    media_type: str = "text/csv"


def render_cell(value: Any) -> str:
    """Scalar to CSV text; missing values become ``N/A`` so every row keeps its width."""
    if value is None or value == "":
        return MISSING_CODE
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class CsvExporter:
    """Flat rows to quoted CSV.

    Every cell is double-quoted (embedded quotes doubled), columns are
    comma-joined and rows newline-joined without a trailing newline.
    """

    def render(self, header: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator=_LINE_TERMINATOR)
        writer.writerow([render_cell(h) for h in header])
        width = len(header)
        for row in rows:
            cells = [render_cell(c) for c in row]
            if len(cells) != width:
                raise ValueError(f"Row has {len(cells)} cells, header has {width}")
            writer.writerow(cells)
        text = buf.getvalue()
        if text.endswith(_LINE_TERMINATOR):
            text = text[: -len(_LINE_TERMINATOR)]
        return text

    def export(
        self,
        name: str,
        header: Sequence[str],
        rows: Iterable[Sequence[Any]],
        *,
        now: Optional[datetime] = None,
    ) -> ExportFile:
        now = now or now_local()
        stamp = int(now.timestamp() * 1000)
        rows = list(rows)
        return ExportFile(
            content=self.render(header, rows).encode("utf-8"),
            filename=f"{name}-{stamp}.csv",
            row_count=len(rows),
        )
