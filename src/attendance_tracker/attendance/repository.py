from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..authorization.policy import ReadScope
from ..core.enums import AttendanceStatus
from .model import AttendanceFilters, AttendancePatch, AttendanceView


class AttendanceRepository(Protocol):
    """Attendance store.

    The store owns the (student, course, UTC day) uniqueness: ``insert`` raises
    DuplicateRecordError on a collision and ``upsert_for_day`` resolves it in a
    single atomic statement.
    """

    def get_view(self, attendance_id: int) -> Optional[AttendanceView]:
        raise NotImplementedError

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
        raise NotImplementedError

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
        """Insert or update the record of that day; ``notes=None`` keeps existing notes.

        Returns the attendance_id of the row written.
        """

        raise NotImplementedError

    def update_fields(self, attendance_id: int, patch: AttendancePatch, *, marked_by: int, now: datetime) -> bool:
        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def list_views(self, scope: ReadScope, filters: AttendanceFilters) -> Sequence[AttendanceView]:
        """Newest first."""

        raise NotImplementedError

    def count_by_status(self, scope: ReadScope, filters: AttendanceFilters) -> dict[AttendanceStatus, int]:
        raise NotImplementedError

    def recorded_days(self, scope: ReadScope, filters: AttendanceFilters) -> set[tuple[int, int, date]]:
        """(student_id, course_id, day) keys having a record, ignoring the status filter."""

        raise NotImplementedError
