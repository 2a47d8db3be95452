from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role, UserStatus
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, *, full_name: str, email: str, password_hash: Optional[str], role: Role) -> int:
        """Insert a user; raises DuplicateRecordError when the email is taken."""

        raise NotImplementedError

    def upsert_by_email(self, *, email: str, full_name: str) -> User:
        """Atomic find-or-create keyed on the unique email.

        New rows get role=student and status=active; existing rows only get their
        display name refreshed.
        """

        raise NotImplementedError

    def set_role(self, user_id: int, *, role: Role) -> bool:
        raise NotImplementedError

    def set_status(self, user_id: int, *, status: UserStatus) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError
