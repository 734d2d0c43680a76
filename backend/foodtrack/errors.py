# Overview: Error taxonomy shared by services and routes, plus JSON error handlers.

"""
Every failure a service can report is an ApiError subclass carrying the HTTP
status it maps to. Routes never build error responses by hand: the handlers
registered here turn exceptions into `{"error": "<message>"}` bodies.

Token failures keep their internal reason (invalid / revoked / expired) on
the exception for logging only. Clients always see the same message.
"""

from __future__ import annotations

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(ApiError):
    """400-level input problem."""
    status_code = 400
    message = "Invalid request"


class InvalidCredentials(ApiError):
    status_code = 401
    message = "Invalid credentials"


class Unauthorized(ApiError):
    """Missing, unknown, revoked or expired bearer token."""
    status_code = 401
    message = "Invalid or expired token"

    def __init__(self, reason: str = "invalid", message: str | None = None):
        super().__init__(message)
        self.reason = reason


class Forbidden(ApiError):
    status_code = 403
    message = "Access denied"


class NotFound(ApiError):
    status_code = 404
    message = "Not found"

    @classmethod
    def for_entity(cls, label: str) -> "NotFound":
        return cls(f"{label} not found")


class ConflictError(ApiError):
    """409-level business rule conflict (e.g., duplicate email)."""
    status_code = 409
    message = "Conflict"


class StorageError(ApiError):
    """Connection, constraint or transaction failure in the database."""
    status_code = 500
    message = "Database error"


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        if isinstance(error, Unauthorized):
            current_app.logger.info("Rejected bearer token (%s)", error.reason)
        elif error.status_code >= 500:
            current_app.logger.error("%s: %s", type(error).__name__, error.message)
        return jsonify({"error": error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        return jsonify({"error": error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        current_app.logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500
