from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import calendar_day, isoformat_utc
from ..core.enums import AttendanceStatus, Role


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's attendance for one course on one UTC day."""

    attendance_id: int
    student_id: int
    course_id: int
    attendance_date: datetime
    status: AttendanceStatus
    marked_by: int
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def day(self) -> date:
        return calendar_day(self.attendance_date)


@dataclass(frozen=True)
class AttendanceView:
    """Read-model: a record with its student, course and marker populated."""

    record: AttendanceRecord
    student_name: str
    student_email: str
    course_name: str
    course_code: str
    course_teacher_id: int
    marker_name: str
    marker_role: Role

    def to_dict(self) -> dict:
        r = self.record
        return {
            "id": r.attendance_id,
            "student": {"id": r.student_id, "name": self.student_name, "email": self.student_email},
            "course": {"id": r.course_id, "name": self.course_name, "code": self.course_code},
            "date": isoformat_utc(r.attendance_date),
            "status": r.status.value,
            "notes": r.notes,
            "markedBy": {"id": r.marked_by, "name": self.marker_name, "role": self.marker_role.value},
            "createdAt": isoformat_utc(r.created_at),
            "updatedAt": isoformat_utc(r.updated_at),
        }


@dataclass(frozen=True)
class AttendanceFilters:
    """Optional list/stats filters; the day range is inclusive on both ends."""

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    course_id: Optional[int] = None
    student_id: Optional[int] = None
    status: Optional[AttendanceStatus] = None


@dataclass(frozen=True)
class AttendancePatch:
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
    notes_provided: bool = False

    @property
    def empty(self) -> bool:
        return self.status is None and not self.notes_provided


@dataclass(frozen=True)
class AttendanceStats:
    counts: dict[AttendanceStatus, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def attendance_rate(self) -> float:
        if not self.total:
            return 0
        attended = self.counts.get(AttendanceStatus.PRESENT, 0) + self.counts.get(AttendanceStatus.LATE, 0)
        return round(attended / self.total * 100, 2)

    def to_dict(self) -> dict:
        data = {status.value: int(self.counts.get(status, 0)) for status in AttendanceStatus}
        data["total"] = self.total
        data["attendanceRate"] = self.attendance_rate
        return data
