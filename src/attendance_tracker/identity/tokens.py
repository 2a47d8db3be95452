from __future__ import annotations

from datetime import timedelta

import jwt

from ..common.datetime_utils import utc_now

ALGORITHM = "HS256"


class TokenIssuer:
    """Issues local signed access tokens (``sub`` = user id)."""

    def __init__(self, secret: str, *, expire_days: int = 30):
        self._secret = secret
        self._expire = timedelta(days=int(expire_days))

    @property
    def secret(self) -> str:
        return self._secret

    def issue(self, user_id: int) -> str:
        now = utc_now()
        payload = {"sub": str(user_id), "iat": now, "exp": now + self._expire}
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)
