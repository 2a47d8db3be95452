from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from .model import Course, ScheduleSlot


class CourseRepository(Protocol):
    """Course membership store."""

    def get_by_id(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

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
        """Insert a course; raises DuplicateRecordError when the code is taken."""

        raise NotImplementedError

    def ensure_course_by_code(
        self,
        *,
        code: str,
        name: str,
        description: Optional[str],
        owner_id: int,
        start_date: date,
    ) -> int:
        """Atomic find-or-create keyed on the unique code, owner as teacher and enrolled student.

        Returns course_id. Idempotent: repeated calls return the same course and
        never duplicate the enrolment.
        """

        raise NotImplementedError

    def is_enrolled(self, *, student_id: int, course_id: int) -> bool:
        raise NotImplementedError

    def is_teacher_of(self, *, teacher_id: int, course_id: int) -> bool:
        raise NotImplementedError

    def add_students(self, course_id: int, student_ids: Iterable[int]) -> None:
        """Set union; already enrolled ids are ignored."""

        raise NotImplementedError

    def remove_students(self, course_id: int, student_ids: Iterable[int]) -> None:
        """Set difference; ids not enrolled are ignored."""

        raise NotImplementedError

    def list_courses(
        self,
        *,
        teacher_id: Optional[int] = None,
        student_id: Optional[int] = None,
        course_id: Optional[int] = None,
    ) -> Sequence[Course]:
        raise NotImplementedError
