from __future__ import annotations

from datetime import date

from attendance_tracker.attendance.model import AttendanceFilters
from attendance_tracker.attendance.mysql_attendance_repository import build_filter_clause
from attendance_tracker.authorization.policy import ReadScope
from attendance_tracker.core.enums import AttendanceStatus


def test_unrestricted_without_filters():
    where, params = build_filter_clause(ReadScope(), AttendanceFilters())
    assert where == "1=1"
    assert params == []


def test_scope_is_always_applied_before_filters():
    where, params = build_filter_clause(
        ReadScope(teacher_id=7),
        AttendanceFilters(course_id=3, student_id=9),
    )
    assert where == "1=1 AND c.teacher_id=%s AND ar.course_id=%s AND ar.student_id=%s"
    assert params == [7, 3, 9]


def test_day_range_uses_generated_day_column():
    where, params = build_filter_clause(
        ReadScope(student_id=4),
        AttendanceFilters(start_date=date(2024, 3, 1), end_date=date(2024, 3, 31), status=AttendanceStatus.LATE),
    )
    assert "ar.attendance_day >= %s" in where
    assert "ar.attendance_day <= %s" in where
    assert params == [4, date(2024, 3, 1), date(2024, 3, 31), "late"]


def test_status_can_be_left_out():
    where, params = build_filter_clause(
        ReadScope(),
        AttendanceFilters(status=AttendanceStatus.ABSENT),
        include_status=False,
    )
    assert "status" not in where
    assert params == []
