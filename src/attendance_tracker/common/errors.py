"""Single JSON error boundary for the API."""
from __future__ import annotations

import logging

from flask import Flask
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DependencyUnavailableError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .http import fail

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 400),
    (ValidationError, 400),
    (DependencyUnavailableError, 503),
)


def status_for(error: DomainError) -> int:
    for cls, status in STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 500


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        if status == 401:
            logger.warning("Authentication failed: %s", e.message)
        elif status == 503:
            logger.error("Dependency unavailable: %s", e.message)
        return fail(e.message or "Error", status, e.errors)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        message = f"Server Error: {e}" if app.config.get("DEBUG") else "Server Error"
        return fail(message, 500)
