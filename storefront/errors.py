# storefront/errors.py
import structlog
from flask import jsonify
from werkzeug.exceptions import HTTPException

from .utils.api import api_error

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base for failures that map onto a JSON error response."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message=None, error=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.error = error


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid input"


class InvalidReference(ValidationError):
    default_message = "Invalid product reference"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidToken(AuthenticationError):
    default_message = "Unauthorized - Invalid token"


class InvalidCredential(AuthenticationError):
    default_message = "Invalid email or password"


class AuthorizationError(AppError):
    status_code = 403
    default_message = "Access denied - Admin only"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class DuplicateOrder(ConflictError):
    default_message = "Order already exists"

    def __init__(self, order_id=None, message=None):
        super().__init__(message)
        self.order_id = order_id


class UpstreamError(AppError):
    status_code = 500
    default_message = "Upstream service unavailable"


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(e):
        if e.status_code >= 500:
            logger.error("request_failed", error=e.message, detail=e.error)
        r = jsonify(api_error(e.message, e.error))
        r.status_code = e.status_code
        return r

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        r = jsonify(api_error(e.description or e.name))
        r.status_code = e.code or 500
        return r

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        from .extensions import db
        db.session.rollback()
        logger.exception("unhandled_error", error=str(e))
        r = jsonify(api_error("Server error", str(e)))
        r.status_code = 500
        return r
