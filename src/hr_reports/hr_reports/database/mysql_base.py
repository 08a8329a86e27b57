from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector

from ..core.exceptions import StoreUnavailable
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def read_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield a cursor on a fresh connection; driver errors become StoreUnavailable."""
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        logger.error("Record store connection failed: %s", exc)
        raise StoreUnavailable("Record store unavailable", detail=str(exc)) from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield cur
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        logger.error("Record store read failed: %s", exc)
        raise StoreUnavailable("Record store read failed", detail=str(exc)) from exc
    finally:
        conn.close()


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(column: str, values: Sequence[Any]) -> tuple[str, list[Any]]:
    """Build ``column IN (%s, ...)`` with its params."""
    placeholders = ",".join(["%s"] * len(values))
    return f"{column} IN ({placeholders})", list(values)


def as_float(value: Any, default: float = 0.0) -> float:
    """Normalize DECIMAL/None/str numeric columns to float."""

    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return float(value)
    return float(value)


def as_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def predicate_clauses(predicate, *, alias: str, date_columns: Dict[str, str]) -> tuple[list[str], list[Any]]:
    """Translate a StorePredicate into WHERE clauses and params.

    ``date_columns`` maps a DateField value to the SQL expression it constrains.
    """

    clauses = [f"{alias}.company_id=%s"]
    params: list[Any] = [predicate.company_id]

    if predicate.employee_ids is not None:
        clause, values = in_clause(f"{alias}.employee_id", predicate.sorted_employee_ids)
        clauses.append(clause)
        params.extend(values)

    column = date_columns[predicate.date_field.value]
    if predicate.date_range.start is not None:
        clauses.append(f"{column} >= %s")
        params.append(predicate.date_range.start)
    if predicate.date_range.end is not None:
        clauses.append(f"{column} <= %s")
        params.append(predicate.date_range.end)

    if predicate.status is not None:
        clauses.append(f"{alias}.status=%s")
        params.append(predicate.status)

    return clauses, params
