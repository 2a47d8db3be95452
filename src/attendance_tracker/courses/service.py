from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Callable, Iterable, Optional, Sequence

from ..authorization.policy import ReadScope, can_create_course, can_manage_course, can_view_course, read_scope
from ..common.datetime_utils import parse_iso_date, utc_now
from ..common.validators import optional_text, parse_id, require_non_empty
from ..core.constants import (
    MAX_COURSE_CODE_LENGTH,
    SELF_COURSE_DESCRIPTION,
    SELF_COURSE_NAME,
    SELF_COURSE_PREFIX,
)
from ..core.enums import Role, Weekday
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import Course, ScheduleSlot
from .repository import CourseRepository

logger = logging.getLogger(__name__)


def self_course_code(user_id: int) -> str:
    return f"{SELF_COURSE_PREFIX}{user_id}".upper()[:MAX_COURSE_CODE_LENGTH]


def _parse_time(value: Any, field_name: str) -> time:
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field_name}", errors=[{"field": field_name, "message": "expected HH:MM"}])


def parse_schedule(items: Optional[Iterable[dict]]) -> list[ScheduleSlot]:
    slots: list[ScheduleSlot] = []
    for item in items or []:
        if not isinstance(item, dict):
            raise ValidationError("Invalid schedule entry")
        day_raw = str(item.get("day") or "").strip().capitalize()
        try:
            day = Weekday(day_raw)
        except ValueError:
            raise ValidationError(
                "Invalid schedule day",
                errors=[{"field": "schedule.day", "message": "must be Monday..Sunday"}],
            )
        start = _parse_time(item.get("startTime"), "schedule.startTime")
        end = _parse_time(item.get("endTime"), "schedule.endTime")
        if end <= start:
            raise ValidationError("Schedule end time must be after start time")
        slots.append(ScheduleSlot(day=day, start_time=start, end_time=end))
    return slots


class CourseService:
    """Use case: course membership and roster management."""

    def __init__(
        self,
        courses: CourseRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._courses = courses
        self._users = users
        self._clock = clock

    def is_enrolled(self, student_id: int, course_id: int) -> bool:
        return self._courses.is_enrolled(student_id=int(student_id), course_id=int(course_id))

    def is_teacher_of(self, teacher_id: int, course_id: int) -> bool:
        return self._courses.is_teacher_of(teacher_id=int(teacher_id), course_id=int(course_id))

    def ensure_self_course(self, user_id: int, *, today: Optional[date] = None) -> Course:
        course_id = self._courses.ensure_course_by_code(
            code=self_course_code(user_id),
            name=SELF_COURSE_NAME,
            description=SELF_COURSE_DESCRIPTION,
            owner_id=int(user_id),
            start_date=today or self._clock().date(),
        )
        return self._courses.get_by_id(course_id)

    def require_course(self, course_id: int) -> Course:
        course = self._courses.get_by_id(int(course_id))
        if not course:
            raise NotFoundError(f"Course not found with id of {course_id}")
        return course

    def _require_open_roster(self, course: Course) -> None:
        # Self-attendance courses only ever enrol their owner.
        if course.is_self_course:
            raise ValidationError("Self-attendance course membership cannot be changed")

    def _parse_member_ids(self, ids: Any) -> list[int]:
        if not isinstance(ids, list) or not ids:
            raise ValidationError("students must be a non-empty list")
        return [parse_id(v, "student") for v in ids]

    def add_members(self, actor: User, course_id: int, ids: Any) -> Course:
        course = self.require_course(course_id)
        can_manage_course(actor, teaches_course=course.teacher_id == actor.user_id).enforce()
        self._require_open_roster(course)

        student_ids = self._parse_member_ids(ids)
        for sid in student_ids:
            user = self._users.get_by_id(sid)
            if not user or user.role != Role.STUDENT:
                raise ValidationError(f"User {sid} is not a student")

        self._courses.add_students(course.course_id, student_ids)
        logger.info("Course %s: added students %s", course.course_id, student_ids)
        return self._courses.get_by_id(course.course_id)

    def remove_members(self, actor: User, course_id: int, ids: Any) -> Course:
        course = self.require_course(course_id)
        can_manage_course(actor, teaches_course=course.teacher_id == actor.user_id).enforce()
        self._require_open_roster(course)

        student_ids = self._parse_member_ids(ids)
        self._courses.remove_students(course.course_id, student_ids)
        logger.info("Course %s: removed students %s", course.course_id, student_ids)
        return self._courses.get_by_id(course.course_id)

    def courses_in_scope(self, scope: ReadScope, *, course_id: Optional[int] = None) -> Sequence[Course]:
        return self._courses.list_courses(teacher_id=scope.teacher_id, student_id=scope.student_id, course_id=course_id)

    def list_courses(self, actor: User) -> Sequence[Course]:
        return self.courses_in_scope(read_scope(actor))

    def get_course(self, actor: User, course_id: int) -> Course:
        course = self.require_course(course_id)
        can_view_course(
            actor,
            teaches_course=course.teacher_id == actor.user_id,
            enrolled=actor.user_id in course.student_ids,
        ).enforce()
        return course

    def create_course(
        self,
        actor: User,
        *,
        name: Optional[str],
        code: Optional[str],
        description: Optional[str] = None,
        teacher: Any = None,
        students: Optional[list] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        schedule: Optional[list] = None,
        is_active: bool = True,
    ) -> Course:
        can_create_course(actor).enforce()

        name = require_non_empty(name, "name")
        code = require_non_empty(code, "code").upper()
        if len(code) > MAX_COURSE_CODE_LENGTH:
            raise ValidationError(f"code must be at most {MAX_COURSE_CODE_LENGTH} characters")
        if code.startswith(SELF_COURSE_PREFIX):
            raise ValidationError(f"Course codes starting with {SELF_COURSE_PREFIX} are reserved")

        # Teachers always own the courses they create.
        teacher_id = actor.user_id
        if actor.role == Role.ADMIN and teacher is not None:
            teacher_id = parse_id(teacher, "teacher")
        owner = self._users.get_by_id(teacher_id)
        if not owner or owner.role not in (Role.TEACHER, Role.ADMIN):
            raise ValidationError("Course teacher must be a teacher or admin")

        if students is not None and not isinstance(students, list):
            raise ValidationError("students must be a list")
        student_ids = [parse_id(v, "student") for v in (students or [])]
        for sid in student_ids:
            user = self._users.get_by_id(sid)
            if not user or user.role != Role.STUDENT:
                raise ValidationError(f"User {sid} is not a student")

        start: date = parse_iso_date(start_date, "startDate") if start_date else self._clock().date()
        end: Optional[date] = parse_iso_date(end_date, "endDate") if end_date else None
        if end is not None and end < start:
            raise ValidationError("endDate must not be before startDate")

        try:
            course_id = self._courses.create_course(
                name=name,
                code=code,
                description=optional_text(description),
                teacher_id=teacher_id,
                start_date=start,
                end_date=end,
                is_active=bool(is_active),
                schedule=parse_schedule(schedule),
                student_ids=student_ids,
            )
        except DuplicateRecordError:
            raise ValidationError("Course code already exists", errors=[{"field": "code", "message": "duplicate"}])

        logger.info("Course %s (%s) created by %s", course_id, code, actor.user_id)
        return self._courses.get_by_id(course_id)
