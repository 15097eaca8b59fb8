"""Standardised API error responses.

Usage
-----
    from submission_review.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Submission not found")
    return api_error(E.VALIDATION_INVALID, "Invalid status", details={"status": "..."})

``register_error_handlers(app)`` wires every ``ServiceError`` subclass,
werkzeug ``HTTPException`` and unexpected exceptions to the same envelope:

    {"success": false, "error": "<message>", "code": "<ERR_*>", "details": {...}}
"""

from __future__ import annotations

import logging

from flask import jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from submission_review.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    LimitExceededError,
    NotFoundError,
    ServiceError,
    StateConflictError,
    ValidationError,
)

logger = logging.getLogger(__name__)


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants."""

    # Validation – HTTP 400
    VALIDATION_INVALID = "ERR_VALIDATION"
    LIMIT_EXCEEDED = "ERR_LIMIT_EXCEEDED"

    # Identity – HTTP 401 / 403
    UNAUTHENTICATED = "ERR_UNAUTHENTICATED"
    FORBIDDEN = "ERR_FORBIDDEN"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Conflict – HTTP 409
    CONFLICT_DUPLICATE = "ERR_CONFLICT_DUPLICATE"
    CONFLICT_STATE = "ERR_CONFLICT_STATE"

    # Transport – status taken from the HTTPException
    HTTP = "ERR_HTTP"

    # Server – HTTP 500
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_INVALID: 400,
    E.LIMIT_EXCEEDED: 400,
    E.UNAUTHENTICATED: 401,
    E.FORBIDDEN: 403,
    E.NOT_FOUND: 404,
    E.CONFLICT_DUPLICATE: 409,
    E.CONFLICT_STATE: 409,
    E.DATABASE: 500,
    E.INTERNAL: 500,
}

_SERVICE_ERROR_CODES: dict[type[ServiceError], str] = {
    ValidationError: E.VALIDATION_INVALID,
    LimitExceededError: E.LIMIT_EXCEEDED,
    AuthenticationError: E.UNAUTHENTICATED,
    AuthorizationError: E.FORBIDDEN,
    NotFoundError: E.NOT_FOUND,
    ConflictError: E.CONFLICT_DUPLICATE,
    StateConflictError: E.CONFLICT_STATE,
    InternalError: E.INTERNAL,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Build the ``(response, status)`` pair for an error envelope.

    ``status`` defaults to the code's entry in ``_DEFAULT_STATUS`` (400 when
    unmapped).  ``details`` is omitted from the body when empty.
    """
    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "success": False,
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


def code_for(error: ServiceError) -> str:
    """Resolve the error code for a ServiceError, walking its MRO."""
    for cls in type(error).__mro__:
        code = _SERVICE_ERROR_CODES.get(cls)
        if code:
            return code
    return E.INTERNAL


def register_error_handlers(app):
    """Register app-wide handlers for service, HTTP and unexpected errors."""

    @app.errorhandler(ServiceError)
    def _handle_service_error(error: ServiceError):
        code = code_for(error)
        if code == E.INTERNAL:
            logger.error("Internal error on %s %s: %s", request.method, request.path, error)
            return api_error(code, "Internal server error")
        if code in (E.UNAUTHENTICATED, E.FORBIDDEN):
            logger.info(
                "Access denied on %s %s: %s", request.method, request.path, error,
                extra={"method": request.method, "path": request.path},
            )
        return api_error(code, error.message, details=error.details)

    @app.errorhandler(HTTPException)
    def _handle_http_error(error: HTTPException):
        return api_error(E.HTTP, error.description or error.name, status=error.code or 500)

    @app.errorhandler(SQLAlchemyError)
    def _handle_database_error(error: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.path)
        return api_error(E.DATABASE, "Internal server error")

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        logger.exception("Unexpected error endpoint=%s", request.endpoint)
        return api_error(E.INTERNAL, "Internal server error")
