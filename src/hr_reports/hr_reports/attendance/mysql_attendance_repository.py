from __future__ import annotations

from typing import Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, as_optional_str, fetchall, predicate_clauses, read_cursor
from ..reports.predicates import StorePredicate
from .model import AttendanceRecord
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, predicate: StorePredicate) -> Sequence[AttendanceRecord]:
        if predicate.match_none or predicate.date_range.is_inverted:
            return []

        clauses, params = predicate_clauses(
            predicate,
            alias="ar",
            date_columns={"work_date": "ar.work_date"},
        )
        where = " AND ".join(clauses)

        with read_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT ar.id, ar.company_id, ar.employee_id, ar.work_date, ar.status,
                       ar.work_hours, ar.clock_in, ar.clock_out
                FROM attendance_records ar
                WHERE {where}
                ORDER BY ar.work_date DESC, ar.id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        return [
            AttendanceRecord(
                record_id=str(r["id"]),
                company_id=str(r["company_id"]),
                employee_id=str(r["employee_id"]),
                work_date=r["work_date"],
                status=AttendanceStatus(r["status"]),
                work_hours=as_float(r.get("work_hours")),
                clock_in=as_optional_str(r.get("clock_in")),
                clock_out=as_optional_str(r.get("clock_out")),
            )
            for r in rows
        ]
