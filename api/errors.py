import logging

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError

from models import storage
from utils.exceptions import ApiError, ErrorKind

logger = logging.getLogger(__name__)

# werkzeug status -> error code for aborts raised by Flask itself (404 routes, 405, bad JSON)
HTTP_ERROR_CODES = {
    400: ErrorKind.VALIDATION.value,
    401: ErrorKind.AUTH.value,
    404: ErrorKind.NOT_FOUND.value,
    405: "METHOD_NOT_ALLOWED",
    409: ErrorKind.CONFLICT.value,
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def kind_response(kind: ErrorKind, message: str, details: dict | None = None):
    return error_response(kind.value, message, kind.status, details)


def register_error_handlers(app):
    # Tagged errors raised by services and views
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if err.kind is ErrorKind.INTERNAL:
            logger.error("Internal error: %s", err.message, exc_info=err.__cause__ or err)
        else:
            logger.debug("%s: %s", err.kind.value, err.message)
        return kind_response(err.kind, err.message, err.details)

    # Marshmallow validation errors carry field-level details
    @app.errorhandler(SchemaValidationError)
    def handle_validation_error(err: SchemaValidationError):
        return kind_response(ErrorKind.VALIDATION, "Invalid input", details=err.messages)

    # Unique constraints that slipped past the explicit existence checks
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        storage.rollback()
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        if current_app and current_app.debug:
            logger.exception("Integrity error", exc_info=err)
        if "unique" in lower_msg:
            return kind_response(ErrorKind.CONFLICT, "Unique constraint violated.")
        return kind_response(ErrorKind.VALIDATION, "Integrity error.")

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(HTTP_ERROR_CODES.get(status, "HTTP_ERROR"), err.description, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return kind_response(ErrorKind.INTERNAL, "An unexpected error occurred", details=details)
