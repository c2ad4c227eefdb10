from flask import Blueprint

lifecycle_bp = Blueprint("lifecycle", __name__)

from . import routes  # noqa: E402,F401
