# Error taxonomy and the error-to-response mapping
import functools

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from models import db


class AppError(Exception):
    """Base class for failures that map onto a client-facing response."""
    status_code = 500
    message = 'Server error'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"success": False, "message": self.message}


class ValidationError(AppError):
    status_code = 400
    message = 'Validation failed'

    def __init__(self, errors=None, message=None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self):
        payload = super().to_dict()
        if self.errors:
            payload["errors"] = self.errors
        return payload


class AuthenticationError(AppError):
    status_code = 400
    message = 'Invalid credentials'


class AuthorizationError(AppError):
    status_code = 403
    message = 'You are not authorized to perform this action'


class ForbiddenError(AuthorizationError):
    pass


class NotFoundError(AppError):
    status_code = 404
    message = 'Not found'


class ConflictError(AppError):
    status_code = 400
    message = 'Resource already exists'


class AlreadyExistsError(ConflictError):
    pass


class NotFollowingError(ConflictError):
    message = 'You are not following this user'


class SelfReferenceError(ConflictError):
    message = 'You cannot follow yourself'


class ServerError(AppError):
    status_code = 500
    message = 'Server error'


def status_for(error):
    """Return the HTTP status a given exception should be reported with."""
    if isinstance(error, AppError):
        return error.status_code
    if isinstance(error, HTTPException) and error.code:
        return error.code
    return 500


def server_error(message):
    """Report unexpected failures of a route as a ServerError with `message`.

    Domain errors and HTTP exceptions pass through untouched; anything else
    rolls back the session before being re-raised.
    """
    def decorator(f):
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except (AppError, HTTPException):
                raise
            except Exception as e:
                db.session.rollback()
                raise ServerError(message) from e
        return wrapper
    return decorator


def _server_error_response(error, cause):
    current_app.logger.error("%s: %s", error.message, cause, exc_info=cause)
    payload = error.to_dict()
    if current_app.debug:
        payload["error"] = str(cause)
    return jsonify(payload), 500


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(error):
        if isinstance(error, ServerError):
            return _server_error_response(error, error.__cause__ or error)
        return jsonify(error.to_dict()), status_for(error)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error):
        limit_mb = app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
        return jsonify({
            "success": False,
            "message": f"File too large. Maximum size is {limit_mb}MB"
        }), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        messages = {404: 'Route not found', 405: 'Method not allowed'}
        return jsonify({
            "success": False,
            "message": messages.get(error.code, error.description)
        }), status_for(error)

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        db.session.rollback()
        return _server_error_response(ServerError(), error)
