import logging

from flask import jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from services.errors import ServiceError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Core component errors carry their own status and code
    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        if err.status_code >= 500:
            logger.error("Internal failure: %s", err.message, exc_info=err)
            return error_response("INTERNAL_ERROR", INTERNAL_ERROR_MESSAGE, 500)
        return error_response(err.error_code, err.message, err.status_code, details=err.details)

    # Marshmallow validation errors are client input errors
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return error_response("VALIDATION_ERROR", "Invalid input", 400, details=err.messages)

    # 404 Not Found (unknown routes)
    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", 404)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        if status >= 500:
            logger.error("HTTP %s: %s", status, err.description)
            return error_response("INTERNAL_ERROR", INTERNAL_ERROR_MESSAGE, status)
        return error_response(err.name.upper().replace(" ", "_"), err.description, status)

    # 500 Internal Error (catch-all); details stay in the server log
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response("INTERNAL_ERROR", INTERNAL_ERROR_MESSAGE, 500)
