import logging

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException
from flask_wtf.csrf import CSRFError

from ...errors import TaskflowError
from ...extensions import db
from . import errors_bp

log = logging.getLogger(__name__)


def _error(kind: str, message: str, status: int, context=None):
    body = {"success": False, "error": {"type": kind, "message": message, "context": context or {}}}
    return jsonify(body), status


# Business-rule errors raised by the services
@errors_bp.app_errorhandler(TaskflowError)
def err_taskflow(e: TaskflowError):
    db.session.rollback()
    log.warning("%s %s -> %s: %s %s", request.method, request.path, e.status_code, e.message, e.context)
    return jsonify({"success": False, "error": e.to_dict()}), e.status_code

# 401 – Unauthorized
@errors_bp.app_errorhandler(401)
def err_401(e):
    return _error("unauthorized", "Please log in to access this page.", 401)

# 403 – Forbidden
@errors_bp.app_errorhandler(403)
def err_403(e):
    return _error("forbidden", "You do not have permission to do this.", 403)

# 404 – Not Found
@errors_bp.app_errorhandler(404)
def err_404(e):
    return _error("not_found", "Not found.", 404, {"path": request.path})

# 405 – Method Not Allowed
@errors_bp.app_errorhandler(405)
def err_405(e):
    return _error("method_not_allowed", "Method not allowed.", 405, {"method": request.method})

# 413 – Payload Too Large (uploads)
@errors_bp.app_errorhandler(413)
def err_413(e):
    limit = current_app.config.get("MAX_CONTENT_LENGTH")
    return _error("payload_too_large", "Uploaded files are too large.", 413, {"max_bytes": limit})

# CSRF – treated as 400 Bad Request
@errors_bp.app_errorhandler(CSRFError)
def err_csrf(e):
    return _error("csrf", e.description, 400)

# Fallback for uncaught HTTPException
@errors_bp.app_errorhandler(HTTPException)
def err_http(e: HTTPException):
    return _error(e.name.lower().replace(" ", "_"), e.description, e.code)

# Last-resort: any other Exception
@errors_bp.app_errorhandler(Exception)
def err_unexpected(e):
    db.session.rollback()
    log.exception("unhandled error on %s %s", request.method, request.path)
    # Don't leak internals; just a generic 500
    return _error("internal", "Internal server error.", 500)
