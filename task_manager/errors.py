"""Error responses and handlers with OpenTelemetry trace context."""

import logging
from typing import Any

from flask import Flask, jsonify
from marshmallow import ValidationError
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from werkzeug.exceptions import HTTPException


logger = logging.getLogger(__name__)

_DEFAULT_MESSAGES = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Access denied",
    404: "Not found",
    405: "Method not allowed",
    409: "Conflict",
    415: "Unsupported media type",
}


def error_response(message: str, status_code: int, errors: Any = None) -> tuple:
    """Create error response with trace context.

    Use this function in routes instead of returning jsonify directly.

    Args:
        message: Error message.
        status_code: HTTP status code.
        errors: Optional field-level error details.

    Returns:
        Tuple of (response, status_code).
    """
    response: dict[str, Any] = {"message": message}
    if errors:
        response["errors"] = errors

    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        response["trace_id"] = format(span_context.trace_id, "032x")

    return jsonify(response), status_code


def validation_error_response(err: ValidationError) -> tuple:
    """Render a marshmallow ValidationError as a 400 response."""
    messages = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
    return error_response("Validation failed", 400, errors=messages)


def register_error_handlers(app: Flask) -> None:
    """Register error handlers on Flask app.

    Args:
        app: Flask application instance.
    """

    @app.errorhandler(ValidationError)
    def validation_failed(error: ValidationError):
        return validation_error_response(error)

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        status_code = error.code or 500
        message = _DEFAULT_MESSAGES.get(status_code, error.name)
        return error_response(message, status_code)

    @app.errorhandler(Exception)
    def unhandled_error(error: Exception):
        span = trace.get_current_span()
        if span.is_recording():
            span.set_status(Status(StatusCode.ERROR, str(error)))
            span.record_exception(error)
            span.set_attribute("error.type", "unhandled_exception")
        logger.exception(f"Unhandled exception: {error}")
        return error_response("Server error", 500)
