# taskflow/security.py
from functools import wraps

from flask import abort, g
from flask_login import current_user

from .services.authz import Actor


def roles_required(*codes):
    """Allow the route only to users whose role code is one of ``codes``."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if current_user.role_code not in codes:
                abort(403)
            return view(*args, **kwargs)
        return wrapped
    return decorator


def current_actor() -> Actor:
    """The logged-in user as an Actor, resolved once per request."""
    actor = g.get("actor")
    if actor is None:
        if not current_user.is_authenticated:
            abort(401)
        actor = g.actor = Actor.from_user(current_user)
    return actor
