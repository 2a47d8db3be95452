from __future__ import annotations

from ..core.enums import Role


def role_topic(role: Role) -> str:
    return f"role:{role.value}"


def identity_topic(user_id: int) -> str:
    return f"identity:{user_id}"


def attendance_audience(student_id: int) -> list[str]:
    """Rooms that hear about a change to ``student_id``'s attendance."""

    return [role_topic(Role.ADMIN), role_topic(Role.TEACHER), identity_topic(student_id)]
