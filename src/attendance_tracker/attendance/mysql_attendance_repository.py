from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..authorization.policy import ReadScope
from ..common.datetime_utils import as_utc, to_naive_utc
from ..core.enums import AttendanceStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceFilters, AttendancePatch, AttendanceRecord, AttendanceView
from .repository import AttendanceRepository

_VIEW_SELECT = """
    SELECT
        ar.attendance_id, ar.student_id, ar.course_id, ar.attendance_date, ar.status, ar.notes,
        ar.marked_by, ar.created_at, ar.updated_at,
        s.full_name AS student_name, s.email AS student_email,
        c.name AS course_name, c.code AS course_code, c.teacher_id AS course_teacher_id,
        m.full_name AS marker_name, m.role AS marker_role
    FROM attendance_records ar
    JOIN users s ON s.user_id = ar.student_id
    JOIN courses c ON c.course_id = ar.course_id
    JOIN users m ON m.user_id = ar.marked_by
"""


def build_filter_clause(
    scope: ReadScope,
    filters: AttendanceFilters,
    *,
    include_status: bool = True,
) -> tuple[str, list[Any]]:
    """WHERE clause for scope ∩ filters; expects ``ar`` and ``c`` (courses) aliases."""

    clauses = ["1=1"]
    params: list[Any] = []

    if scope.student_id is not None:
        clauses.append("ar.student_id=%s")
        params.append(int(scope.student_id))
    if scope.teacher_id is not None:
        clauses.append("c.teacher_id=%s")
        params.append(int(scope.teacher_id))

    if filters.start_date is not None:
        clauses.append("ar.attendance_day >= %s")
        params.append(filters.start_date)
    if filters.end_date is not None:
        clauses.append("ar.attendance_day <= %s")
        params.append(filters.end_date)
    if filters.course_id is not None:
        clauses.append("ar.course_id=%s")
        params.append(int(filters.course_id))
    if filters.student_id is not None:
        clauses.append("ar.student_id=%s")
        params.append(int(filters.student_id))
    if include_status and filters.status is not None:
        clauses.append("ar.status=%s")
        params.append(filters.status.value)

    return " AND ".join(clauses), params


def _optional_utc(value: Optional[datetime]) -> Optional[datetime]:
    return as_utc(value) if value is not None else None


def _to_view(r: dict) -> AttendanceView:
    return AttendanceView(
        record=AttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            student_id=int(r["student_id"]),
            course_id=int(r["course_id"]),
            attendance_date=as_utc(r["attendance_date"]),
            status=AttendanceStatus(r["status"]),
            marked_by=int(r["marked_by"]),
            notes=r.get("notes"),
            created_at=_optional_utc(r.get("created_at")),
            updated_at=_optional_utc(r.get("updated_at")),
        ),
        student_name=r["student_name"],
        student_email=r["student_email"],
        course_name=r["course_name"],
        course_code=r["course_code"],
        course_teacher_id=int(r["course_teacher_id"]),
        marker_name=r["marker_name"],
        marker_role=Role(r["marker_role"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_view(self, attendance_id: int) -> Optional[AttendanceView]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_VIEW_SELECT + " WHERE ar.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_view(r) if r else None

    def insert(
        self,
        *,
        student_id: int,
        course_id: int,
        attendance_date: datetime,
        status: AttendanceStatus,
        notes: Optional[str],
        marked_by: int,
        now: datetime,
    ) -> int:
        stamp = to_naive_utc(now)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    student_id, course_id, attendance_date, status, notes, marked_by, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    int(course_id),
                    to_naive_utc(attendance_date),
                    status.value,
                    notes,
                    int(marked_by),
                    stamp,
                    stamp,
                ),
            )
            return int(cur.lastrowid)

    def upsert_for_day(
        self,
        *,
        student_id: int,
        course_id: int,
        attendance_date: datetime,
        status: AttendanceStatus,
        notes: Optional[str],
        marked_by: int,
        now: datetime,
    ) -> int:
        stamp = to_naive_utc(now)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    student_id, course_id, attendance_date, status, notes, marked_by, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    attendance_id=LAST_INSERT_ID(attendance_id),
                    status=VALUES(status),
                    notes=COALESCE(VALUES(notes), notes),
                    marked_by=VALUES(marked_by),
                    updated_at=VALUES(updated_at)
                """,
                (
                    int(student_id),
                    int(course_id),
                    to_naive_utc(attendance_date),
                    status.value,
                    notes,
                    int(marked_by),
                    stamp,
                    stamp,
                ),
            )
            return int(cur.lastrowid)

    def update_fields(self, attendance_id: int, patch: AttendancePatch, *, marked_by: int, now: datetime) -> bool:
        sets = ["marked_by=%s", "updated_at=%s"]
        params: list[Any] = [int(marked_by), to_naive_utc(now)]
        if patch.status is not None:
            sets.append("status=%s")
            params.append(patch.status.value)
        if patch.notes_provided:
            sets.append("notes=%s")
            params.append(patch.notes)
        params.append(int(attendance_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE attendance_records SET {', '.join(sets)} WHERE attendance_id=%s", tuple(params))
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def list_views(self, scope: ReadScope, filters: AttendanceFilters) -> Sequence[AttendanceView]:
        where, params = build_filter_clause(scope, filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _VIEW_SELECT + f" WHERE {where} ORDER BY ar.attendance_date DESC, ar.attendance_id DESC",
                tuple(params),
            )
            return [_to_view(r) for r in fetchall(cur)]

    def count_by_status(self, scope: ReadScope, filters: AttendanceFilters) -> dict[AttendanceStatus, int]:
        where, params = build_filter_clause(scope, filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ar.status, COUNT(*) AS n
                FROM attendance_records ar
                JOIN courses c ON c.course_id = ar.course_id
                WHERE {where}
                GROUP BY ar.status
                """,
                tuple(params),
            )
            return {AttendanceStatus(r["status"]): int(r["n"]) for r in fetchall(cur)}

    def recorded_days(self, scope: ReadScope, filters: AttendanceFilters) -> set[tuple[int, int, date]]:
        where, params = build_filter_clause(scope, filters, include_status=False)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT ar.student_id, ar.course_id, ar.attendance_day
                FROM attendance_records ar
                JOIN courses c ON c.course_id = ar.course_id
                WHERE {where}
                """,
                tuple(params),
            )
            return {(int(r["student_id"]), int(r["course_id"]), r["attendance_day"]) for r in fetchall(cur)}
