from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AttendanceConflictError,
    AuthenticationError,
    AuthorizationError,
    CollaboratorError,
    DeletedError,
    DomainError,
    DuplicateError,
    NotFoundError,
    OperationTimeout,
    PhotoTooLargeError,
    ValidationError,
)

logger = logging.getLogger(__name__)

EXTENSION_KEY = "employee_service"

# Most specific first; the first isinstance match wins.
STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DeletedError, 410),
    (DuplicateError, 409),
    (AttendanceConflictError, 409),
    (PhotoTooLargeError, 413),
)


def respond(data: Any = None, message: str = "ok", status: int = 200):
    return jsonify({"success": status < 400, "message": message, "data": data}), status


def status_for(exc: DomainError) -> int:
    for cls, status in STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 400


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def token_required(view):
    """Parse `Authorization: Bearer <token>` and expose the claims as `g.claims`."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        container = current_app.extensions[EXTENSION_KEY]
        g.claims = container.auth_service.authenticate(bearer_token() or "")
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        if status in (401, 403):
            logger.warning("%s %s rejected: %s", request.method, request.path, exc)
        return respond(message=str(exc), status=status)

    @app.errorhandler(OperationTimeout)
    def handle_timeout(exc: OperationTimeout):
        logger.error("%s %s timed out: %s", request.method, request.path, exc)
        return respond(message="operation timed out", status=504)

    @app.errorhandler(CollaboratorError)
    def handle_collaborator_error(exc: CollaboratorError):
        logger.exception("%s %s failed", request.method, request.path)
        message = str(exc) if app.config.get("DEBUG") else "internal server error"
        return respond(message=message, status=500)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return respond(message=exc.description or exc.name, status=exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("%s %s crashed", request.method, request.path)
        message = f"internal server error: {exc}" if app.config.get("DEBUG") else "internal server error"
        return respond(message=message, status=500)
