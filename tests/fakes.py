"""In-memory repositories with the same atomicity contract as the MySQL ones.

Upserts and unique checks run under a lock, so concurrent callers observe one
winner exactly like the store's unique keys.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Iterable, Optional, Sequence

from attendance_tracker.attendance.model import (
    AttendanceFilters,
    AttendancePatch,
    AttendanceRecord,
    AttendanceView,
)
from attendance_tracker.authorization.policy import ReadScope
from attendance_tracker.common.datetime_utils import as_utc, calendar_day
from attendance_tracker.core.enums import AttendanceStatus, Role, UserStatus
from attendance_tracker.core.exceptions import DuplicateRecordError
from attendance_tracker.courses.model import Course, ScheduleSlot
from attendance_tracker.users.model import User


class InMemoryUsers:
    def __init__(self):
        self._lock = threading.Lock()
        self.users_by_id: dict[int, User] = {}
        self._next_id = 0

    def add(
        self,
        full_name: str,
        email: str,
        role: Role,
        *,
        status: UserStatus = UserStatus.ACTIVE,
        password_hash: Optional[str] = None,
    ) -> User:
        user_id = self.create_user(full_name=full_name, email=email, password_hash=password_hash, role=role)
        if status != UserStatus.ACTIVE:
            self.set_status(user_id, status=status)
        return self.users_by_id[user_id]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.email == email), None)

    def create_user(self, *, full_name: str, email: str, password_hash: Optional[str], role: Role) -> int:
        with self._lock:
            if self.get_by_email(email):
                raise DuplicateRecordError("uq_users_email")
            self._next_id += 1
            self.users_by_id[self._next_id] = User(
                user_id=self._next_id,
                full_name=full_name,
                email=email,
                role=role,
                password_hash=password_hash,
            )
            return self._next_id

    def upsert_by_email(self, *, email: str, full_name: str) -> User:
        with self._lock:
            existing = self.get_by_email(email)
            if existing:
                updated = replace(existing, full_name=full_name)
                self.users_by_id[existing.user_id] = updated
                return updated
            self._next_id += 1
            user = User(user_id=self._next_id, full_name=full_name, email=email, role=Role.STUDENT)
            self.users_by_id[user.user_id] = user
            return user

    def set_role(self, user_id: int, *, role: Role) -> bool:
        user = self.users_by_id.get(int(user_id))
        if not user:
            return False
        self.users_by_id[user.user_id] = replace(user, role=role)
        return True

    def set_status(self, user_id: int, *, status: UserStatus) -> bool:
        user = self.users_by_id.get(int(user_id))
        if not user:
            return False
        self.users_by_id[user.user_id] = replace(user, status=status)
        return True

    def list_all(self) -> Sequence[User]:
        return sorted(self.users_by_id.values(), key=lambda u: u.user_id)


class InMemoryCourses:
    def __init__(self):
        self._lock = threading.Lock()
        self.courses_by_id: dict[int, Course] = {}
        self._next_id = 0
        self.ensure_calls = 0

    def add(
        self,
        name: str,
        code: str,
        teacher_id: int,
        *,
        students: Iterable[int] = (),
        schedule: Sequence[ScheduleSlot] = (),
        start_date: date = date(2024, 1, 1),
        end_date: Optional[date] = None,
        is_active: bool = True,
    ) -> Course:
        course_id = self.create_course(
            name=name,
            code=code,
            description=None,
            teacher_id=teacher_id,
            start_date=start_date,
            end_date=end_date,
            is_active=is_active,
            schedule=schedule,
            student_ids=students,
        )
        return self.courses_by_id[course_id]

    def get_by_id(self, course_id: int) -> Optional[Course]:
        return self.courses_by_id.get(int(course_id))

    def _by_code(self, code: str) -> Optional[Course]:
        return next((c for c in self.courses_by_id.values() if c.code == code), None)

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
        with self._lock:
            if self._by_code(code):
                raise DuplicateRecordError("uq_courses_code")
            self._next_id += 1
            self.courses_by_id[self._next_id] = Course(
                course_id=self._next_id,
                name=name,
                code=code,
                description=description,
                teacher_id=int(teacher_id),
                start_date=start_date,
                end_date=end_date,
                is_active=is_active,
                schedule=tuple(schedule),
                student_ids=frozenset(int(s) for s in student_ids),
            )
            return self._next_id

    def ensure_course_by_code(
        self,
        *,
        code: str,
        name: str,
        description: Optional[str],
        owner_id: int,
        start_date: date,
    ) -> int:
        with self._lock:
            self.ensure_calls += 1
            course = self._by_code(code)
            if course is None:
                self._next_id += 1
                course = Course(
                    course_id=self._next_id,
                    name=name,
                    code=code,
                    description=description,
                    teacher_id=int(owner_id),
                    start_date=start_date,
                )
            course = replace(course, student_ids=course.student_ids | {int(owner_id)})
            self.courses_by_id[course.course_id] = course
            return course.course_id

    def is_enrolled(self, *, student_id: int, course_id: int) -> bool:
        course = self.get_by_id(course_id)
        return bool(course and int(student_id) in course.student_ids)

    def is_teacher_of(self, *, teacher_id: int, course_id: int) -> bool:
        course = self.get_by_id(course_id)
        return bool(course and course.teacher_id == int(teacher_id))

    def add_students(self, course_id: int, student_ids: Iterable[int]) -> None:
        with self._lock:
            course = self.courses_by_id[int(course_id)]
            self.courses_by_id[course.course_id] = replace(
                course, student_ids=course.student_ids | {int(s) for s in student_ids}
            )

    def remove_students(self, course_id: int, student_ids: Iterable[int]) -> None:
        with self._lock:
            course = self.courses_by_id[int(course_id)]
            self.courses_by_id[course.course_id] = replace(
                course, student_ids=course.student_ids - {int(s) for s in student_ids}
            )

    def list_courses(
        self,
        *,
        teacher_id: Optional[int] = None,
        student_id: Optional[int] = None,
        course_id: Optional[int] = None,
    ) -> Sequence[Course]:
        found = []
        for course in sorted(self.courses_by_id.values(), key=lambda c: c.course_id):
            if teacher_id is not None and course.teacher_id != teacher_id:
                continue
            if student_id is not None and student_id not in course.student_ids:
                continue
            if course_id is not None and course.course_id != course_id:
                continue
            found.append(course)
        return found


class InMemoryAttendance:
    def __init__(self, users: InMemoryUsers, courses: InMemoryCourses):
        self._lock = threading.Lock()
        self._users = users
        self._courses = courses
        self.records: dict[int, AttendanceRecord] = {}
        self._next_id = 0
        # (status, notes, now) of each upsert, in commit order
        self.upserts: list[tuple] = []

    def _key_of(self, record: AttendanceRecord) -> tuple[int, int, date]:
        return record.student_id, record.course_id, record.day

    def _find_key(self, key: tuple[int, int, date]) -> Optional[AttendanceRecord]:
        return next((r for r in self.records.values() if self._key_of(r) == key), None)

    def _new(self, *, student_id, course_id, attendance_date, status, notes, marked_by, now) -> int:
        self._next_id += 1
        self.records[self._next_id] = AttendanceRecord(
            attendance_id=self._next_id,
            student_id=int(student_id),
            course_id=int(course_id),
            attendance_date=as_utc(attendance_date),
            status=status,
            marked_by=int(marked_by),
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        return self._next_id

    def get_view(self, attendance_id: int) -> Optional[AttendanceView]:
        record = self.records.get(int(attendance_id))
        if not record:
            return None
        student = self._users.get_by_id(record.student_id)
        course = self._courses.get_by_id(record.course_id)
        marker = self._users.get_by_id(record.marked_by)
        return AttendanceView(
            record=record,
            student_name=student.full_name,
            student_email=student.email,
            course_name=course.name,
            course_code=course.code,
            course_teacher_id=course.teacher_id,
            marker_name=marker.full_name,
            marker_role=marker.role,
        )

    def insert(self, *, student_id, course_id, attendance_date, status, notes, marked_by, now) -> int:
        with self._lock:
            key = (int(student_id), int(course_id), calendar_day(attendance_date))
            if self._find_key(key):
                raise DuplicateRecordError("uq_attendance_student_course_day")
            return self._new(
                student_id=student_id,
                course_id=course_id,
                attendance_date=attendance_date,
                status=status,
                notes=notes,
                marked_by=marked_by,
                now=now,
            )

    def upsert_for_day(self, *, student_id, course_id, attendance_date, status, notes, marked_by, now) -> int:
        with self._lock:
            self.upserts.append((status, notes, now))
            key = (int(student_id), int(course_id), calendar_day(attendance_date))
            existing = self._find_key(key)
            if existing is None:
                return self._new(
                    student_id=student_id,
                    course_id=course_id,
                    attendance_date=attendance_date,
                    status=status,
                    notes=notes,
                    marked_by=marked_by,
                    now=now,
                )
            self.records[existing.attendance_id] = replace(
                existing,
                status=status,
                notes=notes if notes is not None else existing.notes,
                marked_by=int(marked_by),
                updated_at=now,
            )
            return existing.attendance_id

    def update_fields(self, attendance_id: int, patch: AttendancePatch, *, marked_by: int, now: datetime) -> bool:
        with self._lock:
            record = self.records.get(int(attendance_id))
            if not record:
                return False
            changes: dict[str, Any] = {"marked_by": int(marked_by), "updated_at": now}
            if patch.status is not None:
                changes["status"] = patch.status
            if patch.notes_provided:
                changes["notes"] = patch.notes
            self.records[record.attendance_id] = replace(record, **changes)
            return True

    def delete(self, attendance_id: int) -> bool:
        with self._lock:
            return self.records.pop(int(attendance_id), None) is not None

    def _matches(self, record: AttendanceRecord, scope: ReadScope, filters: AttendanceFilters, *, status: bool) -> bool:
        if scope.student_id is not None and record.student_id != scope.student_id:
            return False
        if scope.teacher_id is not None and not self._courses.is_teacher_of(
            teacher_id=scope.teacher_id, course_id=record.course_id
        ):
            return False
        if filters.start_date is not None and record.day < filters.start_date:
            return False
        if filters.end_date is not None and record.day > filters.end_date:
            return False
        if filters.course_id is not None and record.course_id != filters.course_id:
            return False
        if filters.student_id is not None and record.student_id != filters.student_id:
            return False
        if status and filters.status is not None and record.status != filters.status:
            return False
        return True

    def list_views(self, scope: ReadScope, filters: AttendanceFilters) -> Sequence[AttendanceView]:
        rows = [r for r in self.records.values() if self._matches(r, scope, filters, status=True)]
        rows.sort(key=lambda r: (r.attendance_date, r.attendance_id), reverse=True)
        return [self.get_view(r.attendance_id) for r in rows]

    def count_by_status(self, scope: ReadScope, filters: AttendanceFilters) -> dict[AttendanceStatus, int]:
        counts: dict[AttendanceStatus, int] = {}
        for r in self.records.values():
            if self._matches(r, scope, filters, status=True):
                counts[r.status] = counts.get(r.status, 0) + 1
        return counts

    def recorded_days(self, scope: ReadScope, filters: AttendanceFilters) -> set[tuple[int, int, date]]:
        return {self._key_of(r) for r in self.records.values() if self._matches(r, scope, filters, status=False)}


@dataclass
class RecordingPublisher:
    events: list[tuple[str, Any, list[str]]] = field(default_factory=list)

    def publish(self, event: str, payload: Any, topics: Sequence[str]) -> None:
        self.events.append((event, payload, list(topics)))


@dataclass
class StaticReadiness:
    ready: bool = True
    describe: str = "memory"

    def is_ready(self) -> bool:
        return self.ready
