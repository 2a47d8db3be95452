from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..users.repository import UserRepository
from .strategies.base import IdentityStrategy
from .strategies.external_provider import ExternalProviderStrategy, JWKSClaimsVerifier
from .strategies.local_token import LocalTokenStrategy


@dataclass
class IdentityStrategyFactory:
    """Factory Pattern: choose the identity backend from configuration."""

    jwt_secret: str
    idp_jwks_url: Optional[str] = None
    idp_issuer: Optional[str] = None
    idp_audience: Optional[str] = None
    idp_timeout_seconds: int = 5

    def build(self, users: UserRepository) -> IdentityStrategy:
        if self.idp_jwks_url:
            verifier = JWKSClaimsVerifier(
                self.idp_jwks_url,
                issuer=self.idp_issuer,
                audience=self.idp_audience,
                timeout=self.idp_timeout_seconds,
            )
            return ExternalProviderStrategy(users, verifier=verifier)
        return LocalTokenStrategy(users, secret=self.jwt_secret)
