from __future__ import annotations

from typing import Any, Mapping, Optional

from ..core.exceptions import AuthenticationError
from ..users.model import User
from .strategies.base import IdentityStrategy


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Parse ``Bearer <token>``; None when absent or malformed."""

    if not authorization:
        return None
    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        return None
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


class IdentityResolver:
    """Single ``resolve`` contract shared by the HTTP and real-time layers."""

    def __init__(self, strategy: IdentityStrategy):
        self._strategy = strategy

    @property
    def supports_local_credentials(self) -> bool:
        return self._strategy.supports_local_credentials

    def resolve(self, token: Optional[str]) -> User:
        if not token:
            raise AuthenticationError("Authentication required")
        return self._strategy.resolve(token)

    def resolve_request(self, headers: Mapping[str, str], cookies: Mapping[str, str]) -> User:
        token = bearer_token(headers.get("Authorization")) or cookies.get("token")
        return self.resolve(token)

    def resolve_handshake(self, auth: Any, headers: Mapping[str, str]) -> User:
        token = None
        if isinstance(auth, Mapping):
            token = auth.get("token")
        token = token or bearer_token(headers.get("Authorization"))
        return self.resolve(token)
