from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, as_optional_str, fetchall, read_cursor
from ..reports.predicates import RosterPredicate
from .model import RosterEntry, SalaryComponents
from .repository import RosterRepository

# Whitelisted ORDER BY columns keyed by RosterPredicate.sort_by.
_SORT_COLUMNS = {
    "created_at": "e.created_at",
    "joining_date": "e.joining_date",
    "employee_code": "e.employee_code",
    "first_name": "e.first_name",
    "last_name": "e.last_name",
    "employment_status": "e.employment_status",
}


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, predicate: RosterPredicate) -> Sequence[RosterEntry]:
        if predicate.match_none or predicate.joining_range.is_inverted:
            return []

        clauses = ["e.company_id=%s", "e.is_deleted=0"]
        params: list[object] = [predicate.company_id]

        for column, value in (
            ("e.department_id", predicate.department_id),
            ("e.designation_id", predicate.designation_id),
            ("e.employment_status", predicate.employment_status),
            ("e.employment_type", predicate.employment_type),
            ("e.gender", predicate.gender),
        ):
            if value is not None:
                clauses.append(f"{column}=%s")
                params.append(value)

        if predicate.joining_range.start is not None:
            clauses.append("e.joining_date >= %s")
            params.append(predicate.joining_range.start)
        if predicate.joining_range.end is not None:
            clauses.append("e.joining_date <= %s")
            params.append(predicate.joining_range.end)

        where = " AND ".join(clauses)
        order_column = _SORT_COLUMNS.get(predicate.sort_by, "e.created_at")
        direction = "ASC" if predicate.sort_order.value == "asc" else "DESC"

        with read_cursor(self._conn_factory) as cur:
            cur.execute(
                f"""
                SELECT
                    e.id, e.company_id, e.employee_code, e.first_name, e.last_name, e.email,
                    e.department_id, d.name AS department_name,
                    e.designation_id, g.title AS designation_title,
                    e.employment_status, e.employment_type, e.gender,
                    e.basic_salary, e.hra, e.allowances,
                    e.joining_date, e.created_at
                FROM employees e
                LEFT JOIN departments d ON d.department_id = e.department_id AND d.is_deleted = 0
                LEFT JOIN designations g ON g.designation_id = e.designation_id AND g.is_deleted = 0
                WHERE {where}
                ORDER BY {order_column} {direction}, e.id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        return [
            RosterEntry(
                employee_ref=str(r["id"]),
                company_id=str(r["company_id"]),
                employee_code=r["employee_code"],
                first_name=r["first_name"],
                last_name=r.get("last_name") or "",
                email=as_optional_str(r.get("email")),
                department_id=as_optional_str(r.get("department_id")),
                department_name=as_optional_str(r.get("department_name")),
                designation_id=as_optional_str(r.get("designation_id")),
                designation_title=as_optional_str(r.get("designation_title")),
                employment_status=as_optional_str(r.get("employment_status")),
                employment_type=as_optional_str(r.get("employment_type")),
                gender=as_optional_str(r.get("gender")),
                salary=SalaryComponents(
                    basic=as_float(r.get("basic_salary")),
                    hra=as_float(r.get("hra")),
                    allowances=as_float(r.get("allowances")),
                ),
                joining_date=r.get("joining_date"),
                created_at=r.get("created_at"),
            )
            for r in rows
        ]

    def find_ids_in_department(self, *, company_id: str, department_id: str) -> Sequence[str]:
        with read_cursor(self._conn_factory) as cur:
            cur.execute(
                """
                SELECT id FROM employees
                WHERE company_id=%s AND department_id=%s AND is_deleted=0
                """,
                (company_id, department_id),
            )
            return [str(r["id"]) for r in fetchall(cur)]
