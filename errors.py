import enum
import logging

from flask import jsonify
from sqlalchemy.exc import IntegrityError, NoResultFound
from werkzeug.exceptions import HTTPException

from responses import error_response

logger = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    VALIDATION = 400
    AUTH = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL = 500

    @property
    def status(self):
        return self.value


class ApiError(Exception):
    kind = ErrorKind.INTERNAL

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ApiError):
    kind = ErrorKind.VALIDATION


class AuthError(ApiError):
    kind = ErrorKind.AUTH


class ForbiddenError(ApiError):
    kind = ErrorKind.FORBIDDEN


class NotFoundError(ApiError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(ApiError):
    kind = ErrorKind.CONFLICT


def register_error_handlers(app, db):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return jsonify(error_response(e.message, e.details)), e.kind.status

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        # Keep the real status (405, 413, 429...) even when it has no ErrorKind of its own
        return jsonify(error_response(e.description or e.name)), e.code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e):
        db.session.rollback()
        logger.warning('Integrity error: %s', e.orig)
        return jsonify(error_response('Duplicate entry', str(e.orig))), ErrorKind.CONFLICT.status

    @app.errorhandler(NoResultFound)
    def handle_no_result(e):
        db.session.rollback()
        logger.warning('Record not found: %s', e)
        return jsonify(error_response('Record not found', str(e))), ErrorKind.NOT_FOUND.status

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        logger.exception('Unhandled error')
        return jsonify(error_response('Internal server error', str(e))), ErrorKind.INTERNAL.status
