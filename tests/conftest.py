from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import pytest

from attendance_tracker.attendance.service import AttendanceService
from attendance_tracker.core.enums import MissingDayPolicy, Role
from attendance_tracker.courses.model import Course
from attendance_tracker.courses.service import CourseService
from attendance_tracker.identity.tokens import TokenIssuer
from attendance_tracker.realtime.publisher import AttendanceEvents
from attendance_tracker.users.model import User

from fakes import InMemoryAttendance, InMemoryCourses, InMemoryUsers, RecordingPublisher, StaticReadiness

TEST_JWT_SECRET = "test-jwt-secret"
FIXED_NOW = datetime(2024, 3, 14, 9, 30, tzinfo=timezone.utc)


@dataclass
class World:
    users: InMemoryUsers
    courses: InMemoryCourses
    attendance: InMemoryAttendance
    publisher: RecordingPublisher
    readiness: StaticReadiness

    admin: User
    teacher: User
    other_teacher: User
    student: User
    other_student: User

    math: Course
    history: Course

    def service(self, *, missing_day_policy=MissingDayPolicy.EXCLUDE, clock=lambda: FIXED_NOW) -> AttendanceService:
        return AttendanceService(
            self.attendance,
            self.users,
            CourseService(self.courses, self.users, clock=clock),
            AttendanceEvents(self.publisher),
            missing_day_policy=missing_day_policy,
            clock=clock,
        )


@pytest.fixture
def world() -> World:
    users = InMemoryUsers()
    courses = InMemoryCourses()

    admin = users.add("Ada Admin", "admin@example.com", Role.ADMIN)
    teacher = users.add("Tom Teacher", "teacher@example.com", Role.TEACHER)
    other_teacher = users.add("Olga Teacher", "olga@example.com", Role.TEACHER)
    student = users.add("Sam Student", "sam@example.com", Role.STUDENT)
    other_student = users.add("Sue Student", "sue@example.com", Role.STUDENT)

    math = courses.add("Mathematics", "MATH101", teacher.user_id, students=[student.user_id])
    history = courses.add(
        "History",
        "HIST101",
        other_teacher.user_id,
        students=[student.user_id, other_student.user_id],
    )

    return World(
        users=users,
        courses=courses,
        attendance=InMemoryAttendance(users, courses),
        publisher=RecordingPublisher(),
        readiness=StaticReadiness(),
        admin=admin,
        teacher=teacher,
        other_teacher=other_teacher,
        student=student,
        other_student=other_student,
        math=math,
        history=history,
    )


@pytest.fixture
def token_for():
    issuer = TokenIssuer(TEST_JWT_SECRET, expire_days=1)

    def _token(user: User) -> str:
        return issuer.issue(user.user_id)

    return _token
