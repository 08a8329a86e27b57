from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .core.constants import DEFAULT_READ_WORKERS, STANDARD_WORK_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_roster_repository import MySQLRosterRepository
from .leaves.mysql_leave_repository import MySQLLeaveRepository, MySQLLeaveTypeRepository
from .reports.exporter import CsvExporter
from .reports.grouping.engine import GroupingEngine
from .reports.grouping.factory import GroupStrategyFactory
from .reports.service import ReportService
from .reports.statistics import StatisticsCalculator


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    attendance_repo: MySQLAttendanceRepository
    leave_repo: MySQLLeaveRepository
    leave_type_repo: MySQLLeaveTypeRepository
    roster_repo: MySQLRosterRepository

    report_service: ReportService


def build_container(
    *,
    db_config: Mapping[str, Any],
    read_workers: int = DEFAULT_READ_WORKERS,
    standard_work_hours: float = STANDARD_WORK_HOURS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    attendance_repo = MySQLAttendanceRepository(conn)
    leave_repo = MySQLLeaveRepository(conn)
    leave_type_repo = MySQLLeaveTypeRepository(conn)
    roster_repo = MySQLRosterRepository(conn)

    report_service = ReportService(
        attendance_repo,
        leave_repo,
        leave_type_repo,
        roster_repo,
        grouping=GroupingEngine(GroupStrategyFactory()),
        calculator=StatisticsCalculator(standard_work_hours=standard_work_hours),
        exporter=CsvExporter(),
        read_workers=read_workers,
    )

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        leave_repo=leave_repo,
        leave_type_repo=leave_type_repo,
        roster_repo=roster_repo,
        report_service=report_service,
    )
