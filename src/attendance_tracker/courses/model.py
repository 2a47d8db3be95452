from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional

from ..core.constants import SELF_COURSE_PREFIX
from ..core.enums import Weekday


@dataclass(frozen=True)
class ScheduleSlot:
    day: Weekday
    start_time: time
    end_time: time

    def to_dict(self) -> dict:
        return {
            "day": self.day.value,
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
        }


@dataclass(frozen=True)
class Course:
    """Domain entity: an enrollment group with one teacher."""

    course_id: int
    name: str
    code: str
    teacher_id: int
    start_date: date
    description: Optional[str] = None
    end_date: Optional[date] = None
    is_active: bool = True
    schedule: tuple[ScheduleSlot, ...] = ()
    student_ids: frozenset[int] = field(default_factory=frozenset)

    @property
    def is_self_course(self) -> bool:
        return self.code.startswith(SELF_COURSE_PREFIX)

    def meets_on(self, day: date) -> bool:
        """Whether ``day`` is a scheduled day inside the course window.

        A course without schedule slots meets every day.
        """

        if day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        if not self.schedule:
            return True
        weekday = Weekday.from_index(day.weekday())
        return any(slot.day == weekday for slot in self.schedule)

    def to_dict(self) -> dict:
        return {
            "id": self.course_id,
            "name": self.name,
            "code": self.code,
            "description": self.description,
            "teacher": self.teacher_id,
            "students": sorted(self.student_ids),
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat() if self.end_date else None,
            "schedule": [slot.to_dict() for slot in self.schedule],
            "isActive": self.is_active,
        }
