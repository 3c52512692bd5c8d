"""API error taxonomy and the handlers that turn it into JSON responses.

Services raise these; routes never build error responses by hand. Anything
that is not an ``ApiError`` is logged and surfaced as a generic 500.
"""

from flask import jsonify
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    status_code = 500
    error = 'InternalError'
    default_message = '요청 처리 중 오류가 발생했습니다.'

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors

    def to_dict(self):
        body = {'success': False, 'message': self.message, 'error': self.error}
        if self.errors:
            body['errors'] = list(self.errors)
        return body


class ValidationError(ApiError):
    status_code = 400
    error = 'ValidationError'
    default_message = '잘못된 요청입니다.'


class Unauthorized(ApiError):
    status_code = 401
    error = 'Unauthorized'
    default_message = '인증이 필요합니다.'


class Forbidden(ApiError):
    status_code = 403
    error = 'Forbidden'
    default_message = '권한이 없습니다.'


class NotFound(ApiError):
    status_code = 404
    error = 'NotFound'
    default_message = '요청한 리소스를 찾을 수 없습니다.'


class Conflict(ApiError):
    status_code = 409
    error = 'Conflict'
    default_message = '이미 존재하는 리소스입니다.'


class InternalError(ApiError):
    pass


def register_error_handlers(app):
    from bowlingclub import db

    @app.errorhandler(ApiError)
    def handle_api_error(exc):
        if exc.status_code >= 500:
            app.logger.error(f"[error] {exc.error}: {exc.message}")
        else:
            app.logger.info(f"[error] {exc.status_code} {exc.error}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc):
        return jsonify({
            'success': False,
            'message': exc.description,
            'error': exc.name,
        }), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        app.logger.exception(f"[error] unhandled {type(exc).__name__}")
        db.session.rollback()
        return jsonify(InternalError().to_dict()), 500
