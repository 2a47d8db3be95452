from __future__ import annotations

import re
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

_EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", errors=[{"field": field_name, "message": "required"}])
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(
            f"{field_name} must be at least {min_len} characters",
            errors=[{"field": field_name, "message": f"min length {min_len}"}],
        )
    return value


def normalize_email(value: Optional[str]) -> str:
    email = require_non_empty(value, "email").lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Please use a valid email address", errors=[{"field": "email", "message": "invalid"}])
    return email


def parse_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"Invalid {field_name}",
            errors=[{"field": field_name, "message": f"must be one of: {allowed}"}],
        )


def parse_id(value: Any, field_name: str) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name} id", errors=[{"field": field_name, "message": "invalid id"}])
    if parsed <= 0:
        raise ValidationError(f"Invalid {field_name} id", errors=[{"field": field_name, "message": "invalid id"}])
    return parsed


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
