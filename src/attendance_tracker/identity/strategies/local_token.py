from __future__ import annotations

import logging

import jwt

from ...core.exceptions import AuthenticationError
from ...users.model import User
from ...users.repository import UserRepository
from ..tokens import ALGORITHM
from .base import IdentityStrategy

logger = logging.getLogger(__name__)


class LocalTokenStrategy(IdentityStrategy):
    """HS256 tokens signed with the server-held secret."""

    supports_local_credentials = True

    def __init__(self, users: UserRepository, *, secret: str):
        self._users = users
        self._secret = secret

    def resolve(self, token: str) -> User:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[ALGORITHM], options={"require": ["exp", "sub"]})
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired")
        except jwt.PyJWTError as e:
            logger.warning("Rejected local token: %s", e)
            raise AuthenticationError("Invalid token")

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token")

        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("Account is inactive")
        return user
