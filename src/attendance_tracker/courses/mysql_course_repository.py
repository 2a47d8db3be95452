from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, placeholders
from .model import Course, ScheduleSlot
from .repository import CourseRepository


class MySQLCourseRepository(CourseRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load(self, cur, where: str, params: tuple) -> list[Course]:
        cur.execute(
            f"""
            SELECT c.course_id, c.name, c.code, c.description, c.teacher_id,
                   c.start_date, c.end_date, c.is_active
            FROM courses c
            WHERE {where}
            ORDER BY c.course_id
            """,
            params,
        )
        rows = fetchall(cur)
        if not rows:
            return []

        ids = [int(r["course_id"]) for r in rows]
        marks = placeholders(len(ids))

        cur.execute(f"SELECT course_id, student_id FROM course_students WHERE course_id IN ({marks})", tuple(ids))
        students: dict[int, set[int]] = {}
        for r in fetchall(cur):
            students.setdefault(int(r["course_id"]), set()).add(int(r["student_id"]))

        cur.execute(
            f"""
            SELECT course_id, day_of_week, start_time, end_time
            FROM course_schedule
            WHERE course_id IN ({marks})
            ORDER BY course_id, position
            """,
            tuple(ids),
        )
        slots: dict[int, list[ScheduleSlot]] = {}
        for r in fetchall(cur):
            slots.setdefault(int(r["course_id"]), []).append(
                ScheduleSlot(
                    day=Weekday(r["day_of_week"]),
                    start_time=normalize_mysql_time(r["start_time"]),
                    end_time=normalize_mysql_time(r["end_time"]),
                )
            )

        return [
            Course(
                course_id=int(r["course_id"]),
                name=r["name"],
                code=r["code"],
                description=r.get("description"),
                teacher_id=int(r["teacher_id"]),
                start_date=r["start_date"],
                end_date=r.get("end_date"),
                is_active=bool(r["is_active"]),
                schedule=tuple(slots.get(int(r["course_id"]), [])),
                student_ids=frozenset(students.get(int(r["course_id"]), set())),
            )
            for r in rows
        ]

    def get_by_id(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            found = self._load(cur, "c.course_id=%s", (int(course_id),))
            return found[0] if found else None

    def create_course(
        self,
        *,
        name: str,
        code: str,
        description: Optional[str],
        teacher_id: int,
        start_date: date,
        end_date: Optional[date],
        is_active: bool,
        schedule: Sequence[ScheduleSlot],
        student_ids: Iterable[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO courses(name, code, description, teacher_id, start_date, end_date, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, code, description, int(teacher_id), start_date, end_date, 1 if is_active else 0),
            )
            course_id = int(cur.lastrowid)

            if schedule:
                cur.executemany(
                    """
                    INSERT INTO course_schedule(course_id, position, day_of_week, start_time, end_time)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    [(course_id, i, s.day.value, s.start_time, s.end_time) for i, s in enumerate(schedule)],
                )

            ids = sorted({int(s) for s in student_ids})
            if ids:
                cur.executemany(
                    "INSERT IGNORE INTO course_students(course_id, student_id) VALUES(%s,%s)",
                    [(course_id, sid) for sid in ids],
                )
            return course_id

    def ensure_course_by_code(
        self,
        *,
        code: str,
        name: str,
        description: Optional[str],
        owner_id: int,
        start_date: date,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO courses(name, code, description, teacher_id, start_date, is_active)
                VALUES(%s,%s,%s,%s,%s,1)
                ON DUPLICATE KEY UPDATE course_id=LAST_INSERT_ID(course_id)
                """,
                (name, code, description, int(owner_id), start_date),
            )
            course_id = int(cur.lastrowid)
            cur.execute(
                "INSERT IGNORE INTO course_students(course_id, student_id) VALUES(%s,%s)",
                (course_id, int(owner_id)),
            )
            return course_id

    def is_enrolled(self, *, student_id: int, course_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS hit FROM course_students WHERE course_id=%s AND student_id=%s",
                (int(course_id), int(student_id)),
            )
            return fetchone(cur) is not None

    def is_teacher_of(self, *, teacher_id: int, course_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS hit FROM courses WHERE course_id=%s AND teacher_id=%s",
                (int(course_id), int(teacher_id)),
            )
            return fetchone(cur) is not None

    def add_students(self, course_id: int, student_ids: Iterable[int]) -> None:
        ids = sorted({int(s) for s in student_ids})
        if not ids:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                "INSERT IGNORE INTO course_students(course_id, student_id) VALUES(%s,%s)",
                [(int(course_id), sid) for sid in ids],
            )

    def remove_students(self, course_id: int, student_ids: Iterable[int]) -> None:
        ids = sorted({int(s) for s in student_ids})
        if not ids:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM course_students WHERE course_id=%s AND student_id IN ({placeholders(len(ids))})",
                (int(course_id), *ids),
            )

    def list_courses(
        self,
        *,
        teacher_id: Optional[int] = None,
        student_id: Optional[int] = None,
        course_id: Optional[int] = None,
    ) -> Sequence[Course]:
        clauses = ["1=1"]
        params: list[object] = []

        if teacher_id is not None:
            clauses.append("c.teacher_id=%s")
            params.append(int(teacher_id))
        if student_id is not None:
            clauses.append("EXISTS (SELECT 1 FROM course_students cs WHERE cs.course_id=c.course_id AND cs.student_id=%s)")
            params.append(int(student_id))
        if course_id is not None:
            clauses.append("c.course_id=%s")
            params.append(int(course_id))

        with db_cursor(self._conn_factory) as (_, cur):
            return self._load(cur, " AND ".join(clauses), tuple(params))
