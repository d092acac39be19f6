"""
Domain errors and their translation to JSON error responses.

Services raise ApiError subclasses; the handlers registered by
register_error_handlers() turn them into {"status": ..., "message": ...}
bodies. Anything else becomes a generic 500 so internals never leak.
"""

from __future__ import annotations

from flask import Flask, g, jsonify
from werkzeug.exceptions import HTTPException

UNEXPECTED_ERROR_MESSAGE = "Unexpected Error"


class ApiError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CustomerNotFound(ApiError):
    status_code = 404

    def __init__(self, customer_id: int):
        super().__init__(f"Customer not found with id {customer_id}")
        self.customer_id = customer_id


class EmailAlreadyExists(ApiError):
    status_code = 400

    def __init__(self, email: str | None):
        super().__init__(f"Email {email} already exists")
        self.email = email


class InvalidPayload(ApiError):
    status_code = 400


def error_response(status: int, message: str):
    resp = jsonify({"status": status, "message": message})
    resp.status_code = status
    return resp


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def _api_error(e: ApiError):  # type: ignore[no-redef]
        app.logger.info(
            "%s: %s (request_id=%s)", type(e).__name__, e.message, getattr(g, "request_id", None)
        )
        return error_response(e.status_code, e.message)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):  # type: ignore[no-redef]
        status = e.code or 500
        return error_response(status, e.description or e.name)

    @app.errorhandler(Exception)
    def _unexpected_error(e: Exception):  # type: ignore[no-redef]
        # Ensure stack trace shows in logs; the caller only sees the fixed message.
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return error_response(500, UNEXPECTED_ERROR_MESSAGE)
