from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol

import jwt

from ...common.validators import normalize_email
from ...core.exceptions import AuthenticationError, IdentityProviderUnavailableError, ValidationError
from ...users.model import User
from ...users.repository import UserRepository
from .base import IdentityStrategy

logger = logging.getLogger(__name__)


class ClaimsVerifier(Protocol):
    def verify(self, token: str) -> Mapping[str, Any]:
        """Return verified claims, raise AuthenticationError or IdentityProviderUnavailableError."""

        raise NotImplementedError


class JWKSClaimsVerifier:
    """Verifies RS256 provider tokens against the provider's JWKS endpoint."""

    def __init__(
        self,
        jwks_url: str,
        *,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        timeout: int = 5,
        attempts: int = 2,
    ):
        self._client = jwt.PyJWKClient(jwks_url, timeout=timeout)
        self._issuer = issuer
        self._audience = audience
        self._attempts = max(1, int(attempts))

    def _signing_key(self, token: str):
        last_error: Optional[Exception] = None
        for _ in range(self._attempts):
            try:
                return self._client.get_signing_key_from_jwt(token)
            except jwt.PyJWKClientConnectionError as e:
                last_error = e
        logger.error("Identity provider unreachable: %s", last_error)
        raise IdentityProviderUnavailableError("Identity provider unavailable") from last_error

    def verify(self, token: str) -> Mapping[str, Any]:
        try:
            key = self._signing_key(token)
            return jwt.decode(
                token,
                key.key,
                algorithms=["RS256"],
                issuer=self._issuer,
                audience=self._audience,
                options={"require": ["exp"], "verify_aud": self._audience is not None},
            )
        except (jwt.PyJWKClientError, jwt.PyJWTError) as e:
            logger.warning("Rejected provider token: %s", e)
            raise AuthenticationError("Invalid token")


def extract_profile(claims: Mapping[str, Any]) -> tuple[str, str]:
    """(email, display name) from verified provider claims."""

    email = claims.get("email")
    if isinstance(email, (list, tuple)):
        email = email[0] if email else None
    email = email or claims.get("sub")

    name = claims.get("name")
    if not name:
        name = f"{claims.get('first_name') or ''} {claims.get('last_name') or ''}".strip()
    return email or "", name or "User"


class ExternalProviderStrategy(IdentityStrategy):
    """Provider-issued tokens; first sight provisions a local student account."""

    def __init__(self, users: UserRepository, *, verifier: ClaimsVerifier):
        self._users = users
        self._verifier = verifier

    def resolve(self, token: str) -> User:
        claims = self._verifier.verify(token)
        raw_email, name = extract_profile(claims)
        try:
            email = normalize_email(raw_email)
        except ValidationError:
            raise AuthenticationError("Token has no usable email claim")

        user = self._users.upsert_by_email(email=email, full_name=name)
        if not user.is_active:
            raise AuthenticationError("Account is inactive")
        return user
