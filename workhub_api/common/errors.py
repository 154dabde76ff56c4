# workhub_api/common/errors.py
from flask import Blueprint, current_app
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import IntegrityError
from workhub_api.common.http import fail
from workhub_api.extensions import db

bp_errors = Blueprint("errors", __name__)


class APIError(Exception):
    """Domain error raised from services and rendered as a JSON envelope."""
    def __init__(self, code, message, status_code=400, payload=None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.payload = payload


class NotFound(APIError):
    def __init__(self, message="Not found", payload=None):
        super().__init__("NOT_FOUND", message, 404, payload)


class Forbidden(APIError):
    def __init__(self, message="Forbidden", payload=None):
        super().__init__("FORBIDDEN", message, 403, payload)


class InvalidState(APIError):
    def __init__(self, message, payload=None):
        super().__init__("INVALID_STATE", message, 400, payload)


class Conflict(APIError):
    def __init__(self, message, payload=None):
        super().__init__("CONFLICT", message, 409, payload)


@bp_errors.app_errorhandler(APIError)
def _api_error(e: APIError):
    db.session.rollback()
    return fail(e.message, status=e.status_code, code=e.code, details=e.payload)

@bp_errors.app_errorhandler(HTTPException)
def _http(e: HTTPException):
    return fail(e.description or e.name, status=e.code or 400)

@bp_errors.app_errorhandler(IntegrityError)
def _integrity(e: IntegrityError):
    # 409 for unique/FK violations
    db.session.rollback()
    return fail("Conflict / integrity error", status=409, code="CONSTRAINT_ERROR",
                details=str(e.orig) if getattr(e, "orig", None) else str(e))

@bp_errors.app_errorhandler(Exception)
def _unhandled(e: Exception):
    current_app.logger.exception("Unhandled error: %s", e)
    db.session.rollback()
    return fail("Internal server error", status=500, details=str(e))
