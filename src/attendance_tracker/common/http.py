"""JSON response helpers and auth decorators shared by the API controllers."""
from __future__ import annotations

from functools import wraps
from typing import Any, Sequence

from flask import g, jsonify, request

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..identity.resolver import IdentityResolver


def ok(data: Any, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def ok_list(items: Sequence[Any]):
    return jsonify({"success": True, "count": len(items), "data": list(items)}), 200


def fail(message: str, status: int, errors: Any = None):
    body: dict[str, Any] = {"success": False, "message": message}
    if errors is not None:
        body["errors"] = errors
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        if request.is_json and request.get_data(cache=True).strip():
            raise ValidationError("Invalid JSON body")
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def login_required(resolver: IdentityResolver):
    """Resolve the caller into ``g.current_user``; errors go to the error handlers."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = resolver.resolve_request(request.headers, request.cookies)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(*roles: Role):
    """Must be stacked below ``login_required``."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if g.current_user.role not in roles:
                allowed = " or ".join(r.value for r in roles)
                raise AuthorizationError(f"{allowed.capitalize()} access required")
            return view(*args, **kwargs)

        return wrapper

    return decorator
