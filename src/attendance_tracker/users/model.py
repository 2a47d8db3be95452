from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role, UserStatus


@dataclass(frozen=True)
class User:
    """Domain entity: a resolved identity.

    Note: Plain data object (no DB access code). ``password_hash`` is only set for
    accounts registered with local credentials.
    """

    user_id: int
    full_name: str
    email: str
    role: Role
    status: UserStatus = UserStatus.ACTIVE
    password_hash: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def to_public(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.full_name,
            "email": self.email,
            "role": self.role.value,
            "status": self.status.value,
        }
