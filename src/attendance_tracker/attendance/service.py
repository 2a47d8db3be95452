from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..authorization.policy import (
    Action,
    ReadScope,
    can_read_record,
    can_write_attendance,
    read_scope,
    self_mark_subject,
)
from ..common.datetime_utils import calendar_day, iter_days, parse_iso_date, parse_iso_datetime, utc_now
from ..common.validators import optional_text, parse_enum, parse_id
from ..core.constants import CONFLICT_MESSAGE
from ..core.enums import AttendanceStatus, MissingDayPolicy, Role
from ..core.exceptions import ConflictError, DuplicateRecordError, NotFoundError, ValidationError
from ..courses.service import CourseService
from ..realtime.publisher import AttendanceEvents
from ..users.model import User
from ..users.repository import UserRepository
from .model import AttendanceFilters, AttendancePatch, AttendanceStats, AttendanceView
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def parse_filters(query: Mapping[str, Any]) -> AttendanceFilters:
    """Build filters from request query parameters (empty values are ignored)."""

    def value(name: str) -> Optional[str]:
        raw = query.get(name)
        return str(raw).strip() if raw is not None and str(raw).strip() else None

    start = value("startDate")
    end = value("endDate")
    course = value("course")
    student = value("student")
    status = value("status")

    filters = AttendanceFilters(
        start_date=parse_iso_date(start, "startDate") if start else None,
        end_date=parse_iso_date(end, "endDate") if end else None,
        course_id=parse_id(course, "course") if course else None,
        student_id=parse_id(student, "student") if student else None,
        status=parse_enum(AttendanceStatus, status, "status") if status else None,
    )
    if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
        raise ValidationError("startDate must not be after endDate")
    return filters


class AttendanceService:
    """Use case: attendance writes, scoped reads and statistics.

    Every committed mutation is announced through ``events`` after the write.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        courses: CourseService,
        events: AttendanceEvents,
        *,
        missing_day_policy: MissingDayPolicy = MissingDayPolicy.EXCLUDE,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._attendance = attendance
        self._users = users
        self._courses = courses
        self._events = events
        self._missing_day_policy = missing_day_policy
        self._clock = clock

    def _require_view(self, attendance_id: int) -> AttendanceView:
        view = self._attendance.get_view(int(attendance_id))
        if not view:
            raise NotFoundError(f"Attendance record not found with id of {attendance_id}")
        return view

    def get(self, actor: User, attendance_id: int) -> AttendanceView:
        view = self._require_view(attendance_id)
        can_read_record(
            actor,
            record_student_id=view.record.student_id,
            teaches_course=view.course_teacher_id == actor.user_id,
        ).enforce()
        return view

    def create(
        self,
        actor: User,
        *,
        student: Any,
        course: Any,
        status: Optional[str],
        date: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceView:
        missing = [name for name, v in (("student", student), ("course", course), ("status", status)) if not v]
        if missing:
            raise ValidationError(
                "Please provide student, course and status",
                errors=[{"field": name, "message": "required"} for name in missing],
            )

        student_id = parse_id(student, "student")
        course_id = parse_id(course, "course")
        status_v = parse_enum(AttendanceStatus, status, "status")
        now = self._clock()
        moment = parse_iso_datetime(date) if date else now

        target = self._users.get_by_id(student_id)
        if not target:
            raise NotFoundError(f"Student not found with id of {student_id}")
        if target.role != Role.STUDENT:
            raise ValidationError("Attendance can only be recorded for students")

        self._courses.require_course(course_id)
        if not self._courses.is_enrolled(student_id, course_id):
            raise ValidationError("Student is not enrolled in this course")

        can_write_attendance(
            actor,
            Action.CREATE,
            teaches_course=self._courses.is_teacher_of(actor.user_id, course_id),
        ).enforce()

        try:
            attendance_id = self._attendance.insert(
                student_id=student_id,
                course_id=course_id,
                attendance_date=moment,
                status=status_v,
                notes=optional_text(notes),
                marked_by=actor.user_id,
                now=now,
            )
        except DuplicateRecordError:
            raise ConflictError(
                CONFLICT_MESSAGE,
                errors={
                    "conflict": {
                        "student": student_id,
                        "course": course_id,
                        "date": calendar_day(moment).isoformat(),
                    }
                },
            )

        view = self._attendance.get_view(attendance_id)
        logger.info("Attendance %s created for student %s by %s", attendance_id, student_id, actor.user_id)
        self._events.updated(view)
        return view

    def update(
        self,
        actor: User,
        attendance_id: int,
        *,
        status: Optional[str] = None,
        notes: Optional[str] = None,
        notes_provided: bool = False,
    ) -> AttendanceView:
        view = self._require_view(attendance_id)
        can_write_attendance(
            actor,
            Action.UPDATE,
            teaches_course=view.course_teacher_id == actor.user_id,
        ).enforce()

        patch = AttendancePatch(
            status=parse_enum(AttendanceStatus, status, "status") if status else None,
            notes=optional_text(notes),
            notes_provided=notes_provided,
        )
        if patch.empty:
            raise ValidationError("Provide status or notes to update")

        if not self._attendance.update_fields(view.record.attendance_id, patch, marked_by=actor.user_id, now=self._clock()):
            raise NotFoundError(f"Attendance record not found with id of {attendance_id}")

        updated = self._require_view(attendance_id)
        logger.info("Attendance %s updated by %s", attendance_id, actor.user_id)
        self._events.updated(updated)
        return updated

    def delete(self, actor: User, attendance_id: int) -> None:
        view = self._require_view(attendance_id)
        can_write_attendance(
            actor,
            Action.DELETE,
            teaches_course=view.course_teacher_id == actor.user_id,
        ).enforce()

        if not self._attendance.delete(view.record.attendance_id):
            raise NotFoundError(f"Attendance record not found with id of {attendance_id}")

        logger.info("Attendance %s deleted by %s", attendance_id, actor.user_id)
        self._events.deleted(view.record.attendance_id, view.record.student_id)

    def self_mark(
        self,
        actor: User,
        *,
        status: Optional[str] = None,
        notes: Optional[str] = None,
        student: Any = None,
    ) -> AttendanceView:
        """Mark the actor for today in their self-attendance course.

        Repeated calls on the same UTC day update the same record.
        """

        status_v = parse_enum(AttendanceStatus, status or AttendanceStatus.PRESENT.value, "status")
        subject_id = self_mark_subject(actor, student)
        now = self._clock()
        course = self._courses.ensure_self_course(subject_id, today=calendar_day(now))

        attendance_id = self._attendance.upsert_for_day(
            student_id=subject_id,
            course_id=course.course_id,
            attendance_date=now,
            status=status_v,
            notes=optional_text(notes),
            marked_by=actor.user_id,
            now=now,
        )

        view = self._attendance.get_view(attendance_id)
        logger.info("Self-mark %s (%s) for user %s", attendance_id, status_v.value, subject_id)
        self._events.updated(view)
        return view

    def list_filtered(self, actor: User, filters: AttendanceFilters) -> Sequence[AttendanceView]:
        return self._attendance.list_views(read_scope(actor), filters)

    def stats(self, actor: User, filters: AttendanceFilters) -> AttendanceStats:
        scope = read_scope(actor)
        counts = dict(self._attendance.count_by_status(scope, filters))

        if (
            self._missing_day_policy == MissingDayPolicy.COUNT_ABSENT
            and filters.start_date is not None
            and filters.end_date is not None
            and filters.status in (None, AttendanceStatus.ABSENT)
        ):
            missing = self._missing_days(scope, filters)
            if missing:
                counts[AttendanceStatus.ABSENT] = counts.get(AttendanceStatus.ABSENT, 0) + missing

        return AttendanceStats(counts=counts)

    def _missing_days(self, scope: ReadScope, filters: AttendanceFilters) -> int:
        """Scheduled (student, course, day) slots up to today that have no record."""

        end: date = min(filters.end_date, self._clock().date())
        recorded = self._attendance.recorded_days(scope, filters)

        missing = 0
        for course in self._courses.courses_in_scope(scope, course_id=filters.course_id):
            if course.is_self_course or not course.is_active:
                continue
            students = set(course.student_ids)
            if scope.student_id is not None:
                students &= {scope.student_id}
            if filters.student_id is not None:
                students &= {filters.student_id}
            if not students:
                continue

            for day in iter_days(filters.start_date, end):
                if not course.meets_on(day):
                    continue
                missing += sum(1 for sid in students if (sid, course.course_id, day) not in recorded)
        return missing
