from __future__ import annotations

from flask import Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException


class ValidationError(Exception):
    """Raised by services when a payload fails validation (HTTP 400)."""

    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ConflictError(Exception):
    """Unique constraint style failures (HTTP 409)."""


def json_error(status: int, error: str, message: str | None = None, **extra):
    body = {"error": error, "message": message or error}
    body.update(extra)
    return jsonify(body), status


_SHORT_NAMES = {
    400: "Bad request",
    401: "Authentication required",
    403: "Insufficient permissions",
    404: "Not found",
    405: "Method not allowed",
    409: "Conflict",
    413: "Payload too large",
    429: "Too many requests",
    500: "Internal server error",
    503: "Service unavailable",
}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation_error(e: ValidationError):  # type: ignore[no-redef]
        return json_error(400, "Validation failed", e.errors[0] if e.errors else None, errors=e.errors)

    @app.errorhandler(ConflictError)
    def _conflict_error(e: ConflictError):  # type: ignore[no-redef]
        return json_error(409, _SHORT_NAMES[409], str(e))

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):  # type: ignore[no-redef]
        code = e.code or 500
        if code == 413:
            return json_error(413, _SHORT_NAMES[413], "Request body exceeds the 10MB limit.")
        return json_error(code, _SHORT_NAMES.get(code, e.name), e.description)

    @app.errorhandler(Exception)
    def _err_500(e: Exception):  # type: ignore[no-redef]
        rid = getattr(g, "request_id", None)
        current_app.logger.exception("Unhandled 500 (request_id=%s path=%s)", rid, request.path)
        return json_error(500, _SHORT_NAMES[500], "Something went wrong.", requestId=rid)
