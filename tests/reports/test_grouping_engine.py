from __future__ import annotations

import random
from datetime import date

import pytest

from conftest import COMPANY, attendance, employee, leave
from src.hr_reports.hr_reports.core.enums import AttendanceStatus, GroupKind, LeaveStatus
from src.hr_reports.hr_reports.core.exceptions import InvalidDimension
from src.hr_reports.hr_reports.leaves.model import LeaveTypeDefinition
from src.hr_reports.hr_reports.reports.grouping.base import ATTENDANCE_PROFILE, LEAVE_PROFILE
from src.hr_reports.hr_reports.reports.grouping.engine import GroupingEngine
from src.hr_reports.hr_reports.reports.grouping.factory import GroupStrategyFactory
from src.hr_reports.hr_reports.reports.joiner import Joiner


@pytest.fixture
def joined_attendance():
    roster = [
        employee("e1", "EMP001", "Ana", "Lopez", department_id="d1", department_name="Engineering"),
        employee("e2", "EMP002", "Ben", "Okafor", department_id="d2", department_name="Sales"),
    ]
    records = [
        attendance("a1", "e2", date(2025, 1, 7), AttendanceStatus.PRESENT, 8),
        attendance("a2", "e1", date(2025, 1, 6), AttendanceStatus.HALF_DAY, 4),
        attendance("a3", "e1", date(2025, 1, 7), AttendanceStatus.PRESENT, 9),
        attendance("a4", "ghost-1", date(2025, 1, 6), AttendanceStatus.ABSENT),
        attendance("a5", "ghost-2", date(2025, 1, 8), AttendanceStatus.PRESENT, 8),
    ]
    return Joiner(COMPANY, roster).join_attendance(records)


def _by_key(groups):
    return {g.key: (g.count, g.total, dict(g.buckets)) for g in groups}


def test_groups_keep_first_seen_order(joined_attendance):
    groups = GroupingEngine().group(joined_attendance, GroupKind.EMPLOYEE, ATTENDANCE_PROFILE)
    assert [g.key for g in groups] == ["e2", "e1", "unknown"]


def test_group_by_date(joined_attendance):
    data = GroupingEngine().group_dicts(joined_attendance, GroupKind.DATE, ATTENDANCE_PROFILE)

    assert [d["date"] for d in data] == ["2025-01-07", "2025-01-06", "2025-01-08"]
    assert data[0] == {
        "date": "2025-01-07",
        "present": 2,
        "absent": 0,
        "halfDay": 0,
        "leave": 0,
        "totalDays": 2,
        "totalWorkHours": 17.0,
    }


def test_dangling_references_collapse_into_one_group(joined_attendance):
    data = GroupingEngine().group_dicts(joined_attendance, GroupKind.EMPLOYEE, ATTENDANCE_PROFILE)

    unknown = [d for d in data if d["name"] == "Unknown"]
    assert len(unknown) == 1
    assert unknown[0]["employeeId"] == "N/A"
    assert unknown[0]["totalDays"] == 2


def test_group_by_department_uses_sentinel_department(joined_attendance):
    data = GroupingEngine().group_dicts(joined_attendance, GroupKind.DEPARTMENT, ATTENDANCE_PROFILE)

    assert [d["department"] for d in data] == ["Sales", "Engineering", "Unassigned"]


def test_totals_are_order_independent(joined_attendance):
    engine = GroupingEngine()
    expected = _by_key(engine.group(joined_attendance, GroupKind.DEPARTMENT, ATTENDANCE_PROFILE))

    shuffled = list(joined_attendance)
    random.Random(7).shuffle(shuffled)

    assert _by_key(engine.group(shuffled, GroupKind.DEPARTMENT, ATTENDANCE_PROFILE)) == expected


def test_partial_accumulators_merge_to_the_whole(joined_attendance):
    engine = GroupingEngine()
    whole = {g.key: g for g in engine.group(joined_attendance, GroupKind.EMPLOYEE, ATTENDANCE_PROFILE)}
    left = {g.key: g for g in engine.group(joined_attendance[:2], GroupKind.EMPLOYEE, ATTENDANCE_PROFILE)}
    right = {g.key: g for g in engine.group(joined_attendance[2:], GroupKind.EMPLOYEE, ATTENDANCE_PROFILE)}

    merged = dict(right)
    for key, acc in left.items():
        merged[key] = acc.merge(right[key]) if key in right else acc

    assert _by_key(merged.values()) == _by_key(whole.values())


def test_merge_rejects_different_keys(joined_attendance):
    groups = GroupingEngine().group(joined_attendance, GroupKind.EMPLOYEE, ATTENDANCE_PROFILE)
    with pytest.raises(ValueError):
        groups[0].merge(groups[1])


def test_leave_groups_by_type_and_status():
    types = [LeaveTypeDefinition("lt1", COMPANY, "Annual Leave", "AL", annual_quota=12)]
    joined = Joiner(COMPANY, [], types).join_leaves(
        [
            leave("l1", "e1", "lt1", date(2025, 2, 3), 1.5),
            leave("l2", "e1", "lt1", date(2025, 2, 4), 2, LeaveStatus.PENDING),
            leave("l3", "e1", "gone", date(2025, 2, 5), 1, LeaveStatus.REJECTED),
        ]
    )
    engine = GroupingEngine()

    by_type = engine.group_dicts(joined, GroupKind.LEAVE_TYPE, LEAVE_PROFILE)
    by_status = engine.group_dicts(joined, GroupKind.STATUS, LEAVE_PROFILE)

    assert by_type[0] == {
        "leaveType": "Annual Leave",
        "code": "AL",
        "approved": 1,
        "pending": 1,
        "rejected": 0,
        "cancelled": 0,
        "count": 2,
        "totalDays": 3.5,
    }
    assert (by_type[1]["leaveType"], by_type[1]["code"]) == ("Unknown", "N/A")
    assert [d["status"] for d in by_status] == ["Approved", "Pending", "Rejected"]


def test_empty_input_yields_no_groups():
    assert GroupingEngine().group_dicts([], GroupKind.DATE, ATTENDANCE_PROFILE) == []


def test_partition_keeps_records_per_key(joined_attendance):
    parts = GroupingEngine().partition(joined_attendance, GroupKind.EMPLOYEE)

    assert list(parts) == ["e2", "e1", "unknown"]
    assert [r.record.record_id for r in parts["e1"]] == ["a2", "a3"]


def test_parse_rejects_unknown_dimension():
    with pytest.raises(InvalidDimension) as exc_info:
        GroupStrategyFactory.parse("weekday", allowed=[GroupKind.DATE, GroupKind.EMPLOYEE], default=GroupKind.DATE)

    assert exc_info.value.allowed == ("date", "employee")


def test_parse_rejects_dimension_not_allowed_here():
    with pytest.raises(InvalidDimension):
        GroupStrategyFactory.parse("leaveType", allowed=[GroupKind.DATE], default=GroupKind.DATE)


def test_parse_defaults_when_missing():
    assert GroupStrategyFactory.parse(None, allowed=[GroupKind.DATE], default=GroupKind.DATE) is GroupKind.DATE
