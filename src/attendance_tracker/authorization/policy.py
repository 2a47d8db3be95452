"""Authorization policy.

Pure decisions over (actor role, actor id, target facts). Callers gather the
facts (e.g. whether the actor teaches a course) and enforce the decision; no
function here touches storage.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NoReturn, Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..users.model import User

RECORD_DENIED = "Not authorized to access this attendance record"
COURSE_DENIED = "Not authorized to access this course"


class Action(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, reason)

    def enforce(self) -> None:
        if not self.allowed:
            raise AuthorizationError(self.reason or "Forbidden")


@dataclass(frozen=True)
class ReadScope:
    """Mandatory query constraint for list/stats reads.

    ``teacher_id`` limits rows to courses taught by that user, ``student_id`` to
    that student's rows. Neither set means unrestricted.
    """

    student_id: Optional[int] = None
    teacher_id: Optional[int] = None

    @property
    def unrestricted(self) -> bool:
        return self.student_id is None and self.teacher_id is None


def _unhandled(role: Role) -> NoReturn:
    raise ValueError(f"Unhandled role: {role!r}")


def read_scope(actor: User) -> ReadScope:
    role = actor.role
    if role == Role.ADMIN:
        return ReadScope()
    if role == Role.TEACHER:
        return ReadScope(teacher_id=actor.user_id)
    if role == Role.STUDENT:
        return ReadScope(student_id=actor.user_id)
    _unhandled(role)


def can_read_record(actor: User, *, record_student_id: int, teaches_course: bool) -> Decision:
    role = actor.role
    if role == Role.ADMIN:
        return Decision.allow()
    if role == Role.TEACHER:
        return Decision.allow() if teaches_course else Decision.deny(RECORD_DENIED)
    if role == Role.STUDENT:
        return Decision.allow() if record_student_id == actor.user_id else Decision.deny(RECORD_DENIED)
    _unhandled(role)


def can_write_attendance(actor: User, action: Action, *, teaches_course: bool) -> Decision:
    """Create/update/delete outside the self-mark path."""

    role = actor.role
    if role == Role.ADMIN:
        return Decision.allow()
    if role == Role.TEACHER:
        if teaches_course:
            return Decision.allow()
        return Decision.deny(f"Not authorized to {action.value} attendance for this course")
    if role == Role.STUDENT:
        return Decision.deny("Teacher or admin access required")
    _unhandled(role)


def self_mark_subject(actor: User, requested_student_id: Optional[int] = None) -> int:
    """The student a self-mark applies to: always the actor, whatever was requested."""

    return actor.user_id


def can_manage_course(actor: User, *, teaches_course: bool) -> Decision:
    """Roster changes (add/remove members)."""

    role = actor.role
    if role == Role.ADMIN:
        return Decision.allow()
    if role == Role.TEACHER:
        return Decision.allow() if teaches_course else Decision.deny(COURSE_DENIED)
    if role == Role.STUDENT:
        return Decision.deny("Teacher or admin access required")
    _unhandled(role)


def can_view_course(actor: User, *, teaches_course: bool, enrolled: bool) -> Decision:
    role = actor.role
    if role == Role.ADMIN:
        return Decision.allow()
    if role == Role.TEACHER:
        return Decision.allow() if teaches_course else Decision.deny(COURSE_DENIED)
    if role == Role.STUDENT:
        return Decision.allow() if enrolled else Decision.deny(COURSE_DENIED)
    _unhandled(role)


def can_create_course(actor: User) -> Decision:
    role = actor.role
    if role in (Role.ADMIN, Role.TEACHER):
        return Decision.allow()
    if role == Role.STUDENT:
        return Decision.deny("Teacher or admin access required")
    _unhandled(role)
