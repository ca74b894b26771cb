"""
Utility: uniform response and error envelopes
Every endpoint answers {statusCode, data, message, success}
"""
import logging
from flask import jsonify, request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
from werkzeug.exceptions import HTTPException
from ..db import db

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Application error carrying the HTTP status sent to the client"""

    def __init__(self, status_code, message="Something went wrong", errors=None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors or []

    def to_dict(self):
        return {
            "statusCode": self.status_code,
            "data": None,
            "message": self.message,
            "success": False,
            "errors": self.errors,
        }


def api_response(data=None, message="Success", status_code=200):
    """Wraps a payload in the success envelope"""
    body = {
        "statusCode": status_code,
        "data": data,
        "message": message,
        "success": status_code < 400,
    }
    return jsonify(body), status_code


def json_object():
    """JSON body of the request as a dict; a missing body reads as {}"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ApiError(400, "Request body must be a JSON object")
    return data


def _error_response(error):
    return jsonify(error.to_dict()), error.status_code


def register_error_handlers(app):
    """Routes every failure through the error envelope"""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        if error.status_code >= 500:
            logger.error("API error %s: %s", error.status_code, error.message)
        return _error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return _error_response(ApiError(error.code or 500, error.description or error.name))

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error):
        db.session.rollback()
        logger.warning("Integrity error: %s", error.orig)
        return _error_response(ApiError(409, "Resource already exists or violates a constraint"))

    @app.errorhandler(StaleDataError)
    def handle_stale_data(error):
        db.session.rollback()
        logger.warning("Concurrent modification detected: %s", error)
        return _error_response(ApiError(409, "Resource was modified by another request, reload and retry"))

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        db.session.rollback()
        logger.exception("Unhandled error")
        return _error_response(ApiError(500, "Internal server error"))
