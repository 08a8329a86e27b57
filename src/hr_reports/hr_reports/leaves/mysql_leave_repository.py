from __future__ import annotations

from typing import Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, as_optional_str, fetchall, predicate_clauses, read_cursor
from ..reports.predicates import StorePredicate
from .model import LeaveRecord, LeaveTypeDefinition
from .repository import LeaveRepository, LeaveTypeRepository


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, predicate: StorePredicate) -> Sequence[LeaveRecord]:
        if predicate.match_none or predicate.date_range.is_inverted:
            return []

        clauses, params = predicate_clauses(
            predicate,
            alias="lr",
            date_columns={
                "created_at": "DATE(lr.created_at)",
                "from_date": "lr.from_date",
                "work_date": "lr.from_date",
            },
        )
        if predicate.leave_type_id is not None:
            clauses.append("lr.leave_type_id=%s")
            params.append(predicate.leave_type_id)
        where = " AND ".join(clauses)

        with read_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT lr.id, lr.company_id, lr.leave_code, lr.employee_id, lr.leave_type_id,
                       lr.from_date, lr.to_date, lr.number_of_days, lr.reason, lr.status, lr.created_at
                FROM leave_records lr
                WHERE {where}
                ORDER BY lr.created_at DESC, lr.id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        return [
            LeaveRecord(
                record_id=str(r["id"]),
                company_id=str(r["company_id"]),
                employee_id=str(r["employee_id"]),
                leave_type_id=as_optional_str(r.get("leave_type_id")),
                from_date=r["from_date"],
                to_date=r["to_date"],
                number_of_days=as_float(r.get("number_of_days")),
                status=LeaveStatus(r["status"]),
                created_at=r["created_at"],
                leave_code=as_optional_str(r.get("leave_code")),
                reason=as_optional_str(r.get("reason")),
            )
            for r in rows
        ]


class MySQLLeaveTypeRepository(LeaveTypeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active(self, company_id: str) -> Sequence[LeaveTypeDefinition]:
        with read_cursor(self._conn_factory) as cur:
            cur.execute(
                """
                SELECT id, company_id, name, code, annual_quota, is_paid
                FROM leave_types
                WHERE company_id=%s AND is_deleted=0
                ORDER BY name
                """,
                (company_id,),
            )
            rows = fetchall(cur)

        return [
            LeaveTypeDefinition(
                leave_type_id=str(r["id"]),
                company_id=str(r["company_id"]),
                name=r["name"],
                code=r["code"],
                annual_quota=as_float(r.get("annual_quota")),
                is_paid=bool(r.get("is_paid", 1)),
            )
            for r in rows
        ]
