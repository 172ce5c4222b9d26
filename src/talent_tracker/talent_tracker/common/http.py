"""JSON helpers shared by the API controllers."""

from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session

from ..core.exceptions import (
    AuditLogError,
    AuthorizationError,
    ConcurrencyError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def error_response(message: str, status: int, *, code: str, details=None):
    return jsonify({"error": message, "code": code, "details": details}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response("Authentication required", 401, code="unauthenticated")
        return view(*args, **kwargs)

    return wrapper


def api_errors(view):
    """Translate domain exceptions into the JSON error envelope."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return error_response(str(e), 400, code=e.code, details=e.details)
        except AuthorizationError as e:
            return error_response(str(e), 403, code="forbidden")
        except NotFoundError as e:
            return error_response(str(e), 404, code="not-found")
        except ConcurrencyError as e:
            return error_response(str(e), 409, code="version-conflict")
        except (PersistenceError, AuditLogError):
            logger.exception("storage failure in %s", view.__name__)
            return error_response("Database error", 500, code="persistence-error")
        except Exception:
            logger.exception("unexpected error in %s", view.__name__)
            return error_response("Internal server error", 500, code="internal-error")

    return wrapper


def current_user_id() -> str:
    return str(session["user_id"])
