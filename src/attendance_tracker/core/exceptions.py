from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    def __init__(self, message: str = "", *, errors: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when a credential is missing, invalid, or belongs to an inactive user."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when an id does not resolve to a record."""


class ConflictError(DomainError):
    """Raised when a create would duplicate an existing (student, course, day) record."""


class DuplicateRecordError(Exception):
    """Raised by repositories when a unique key rejects a write.

    ``key`` names the violated unique key, e.g. ``"uq_attendance_student_course_day"``.
    """

    def __init__(self, key: str = ""):
        super().__init__(key or "duplicate key")
        self.key = key


class DependencyUnavailableError(DomainError):
    """Raised when an external dependency cannot be reached."""


class StorageUnavailableError(DependencyUnavailableError):
    """Raised when the database is unreachable."""


class IdentityProviderUnavailableError(DependencyUnavailableError):
    """Raised when the external identity provider cannot be reached."""
