from __future__ import annotations

from abc import ABC, abstractmethod

from ...users.model import User


class IdentityStrategy(ABC):
    """Strategy Pattern: encapsulate how a bearer credential becomes a User."""

    #: Whether local email/password login and registration are available.
    supports_local_credentials: bool = False

    @abstractmethod
    def resolve(self, token: str) -> User:
        """Return the active user for ``token`` or raise AuthenticationError."""

        raise NotImplementedError
