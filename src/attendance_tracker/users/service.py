from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import normalize_email, parse_enum, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role, UserStatus
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateRecordError,
    NotFoundError,
    ValidationError,
)
from ..identity.tokens import TokenIssuer
from .model import User
from .repository import UserRepository

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = {Role.STUDENT, Role.TEACHER}


@dataclass(frozen=True)
class AuthResult:
    user: User
    token: str


class AuthService:
    """Use case: local-credential registration and login."""

    def __init__(self, users: UserRepository, tokens: TokenIssuer, *, enabled: bool = True):
        self._users = users
        self._tokens = tokens
        self._enabled = enabled

    def _require_enabled(self) -> None:
        if not self._enabled:
            raise ValidationError("Local credentials are disabled; sign in with the identity provider")

    def register(self, *, name: str, email: str, password: str, role: Optional[str] = None) -> AuthResult:
        self._require_enabled()
        full_name = require_non_empty(name, "name")
        email = normalize_email(email)
        require_min_length(password, "password", MIN_PASSWORD_LENGTH)

        role_v = parse_enum(Role, role, "role") if role else Role.STUDENT
        if role_v not in SELF_REGISTER_ROLES:
            raise ValidationError("Admin accounts cannot be self-registered")

        try:
            user_id = self._users.create_user(
                full_name=full_name,
                email=email,
                password_hash=generate_password_hash(password),
                role=role_v,
            )
        except DuplicateRecordError:
            raise ValidationError("Email already registered")

        user = self._users.get_by_id(user_id)
        logger.info("Registered user %s (%s)", user_id, role_v.value)
        return AuthResult(user=user, token=self._tokens.issue(user_id))

    def authenticate(self, email: str, password: str) -> AuthResult:
        self._require_enabled()
        try:
            email = normalize_email(email)
        except ValidationError:
            raise AuthenticationError("Invalid credentials")

        user = self._users.get_by_email(email)
        if not user or not user.password_hash:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Account is inactive")

        return AuthResult(user=user, token=self._tokens.issue(user.user_id))


class UserService:
    """Use case: manage users (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    @staticmethod
    def _require_admin(actor: User) -> None:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

    def list_users(self, actor: User) -> Sequence[User]:
        self._require_admin(actor)
        return self._users.list_all()

    def get_user(self, actor: User, user_id: int) -> User:
        self._require_admin(actor)
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User not found with id of {user_id}")
        return user

    def change_role(self, actor: User, user_id: int, role: str) -> User:
        self._require_admin(actor)
        role_v = parse_enum(Role, role, "role")
        if not self._users.get_by_id(user_id):
            raise NotFoundError(f"User not found with id of {user_id}")
        if actor.user_id == user_id and role_v != Role.ADMIN:
            raise ValidationError("Admins cannot demote themselves")
        self._users.set_role(user_id, role=role_v)
        logger.info("User %s role set to %s by %s", user_id, role_v.value, actor.user_id)
        return self._users.get_by_id(user_id)

    def change_status(self, actor: User, user_id: int, status: str) -> User:
        self._require_admin(actor)
        status_v = parse_enum(UserStatus, status, "status")
        if not self._users.get_by_id(user_id):
            raise NotFoundError(f"User not found with id of {user_id}")
        if actor.user_id == user_id and status_v == UserStatus.INACTIVE:
            raise ValidationError("Admins cannot deactivate themselves")
        self._users.set_status(user_id, status=status_v)
        logger.info("User %s status set to %s by %s", user_id, status_v.value, actor.user_id)
        return self._users.get_by_id(user_id)
