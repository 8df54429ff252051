"""Shared pieces of the Flask controller layer."""

from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, g, jsonify, request

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ..users.access import is_admin, is_employee

logger = logging.getLogger(__name__)

# Most specific first.
_ERROR_STATUS = (
    (ValidationError, 422, "validation_error"),
    (AuthenticationError, 401, "authentication_error"),
    (AuthorizationError, 403, "authorization_error"),
    (NotFoundError, 404, "not_found"),
    (InvalidTransitionError, 409, "invalid_transition"),
    (ConflictError, 409, "conflict"),
)


def read_form() -> dict:
    """JSON body if present, otherwise the submitted form fields."""

    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def error_response(message: str, status: int, kind: str, **extra):
    body = {"error": kind, "message": message}
    body.update(extra)
    return jsonify(body), status


def domain_error_response(exc: DomainError):
    for exc_type, status, kind in _ERROR_STATUS:
        if isinstance(exc, exc_type):
            break
    else:
        status, kind = 400, "domain_error"

    extra = {}
    if isinstance(exc, ValidationError):
        extra["fields"] = exc.fields
    if isinstance(exc, InvalidTransitionError):
        extra["current_status"] = getattr(exc.current_status, "value", exc.current_status)
    return error_response(str(exc), status, kind, **extra)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return domain_error_response(exc)

    @app.errorhandler(404)
    def handle_not_found(_exc):
        return error_response("resource not found", 404, "not_found")

    @app.errorhandler(405)
    def handle_method_not_allowed(_exc):
        return error_response("method not allowed", 405, "method_not_allowed")

    @app.errorhandler(500)
    def handle_server_error(exc):
        original = getattr(exc, "original_exception", None) or exc
        logger.error("unhandled error on %s %s", request.method, request.path, exc_info=original)
        return error_response("internal server error", 500, "server_error")


def current_principal():
    return g.get("principal")


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_principal() is None:
            return error_response("Please sign in to continue.", 401, "authentication_required")
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        principal = current_principal()
        if principal is None:
            return error_response("Please sign in to continue.", 401, "authentication_required")
        if not is_admin(principal):
            return error_response("Access denied. Admin only.", 403, "authorization_error")
        return view(*args, **kwargs)

    return wrapper


def employee_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        principal = current_principal()
        if principal is None:
            return error_response("Please sign in to continue.", 401, "authentication_required")
        if not is_employee(principal):
            return error_response("Access denied. Employee only.", 403, "authorization_error")
        return view(*args, **kwargs)

    return wrapper
