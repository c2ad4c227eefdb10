# taskflow/blueprints/auth/routes.py
import logging

from flask import jsonify
from flask_login import current_user, login_required, login_user, logout_user

from ...errors import ValidationError
from ...models.user import User
from ...services import store
from .. import form_errors
from . import auth_bp
from .forms import LoginForm, RegisterForm

log = logging.getLogger(__name__)


@auth_bp.post("/register")
def register():
    form = RegisterForm()
    if not form.validate_on_submit():
        raise ValidationError("Registration data is invalid.", {"fields": form_errors(form)})

    user = User(
        name=form.name.data.strip(),
        email=form.email.data.strip().lower(),
        role_id=store.get_role_by_code(form.role.data).id,
    )
    user.set_password(form.password.data)
    store.add_user(user)
    store.commit()

    log.info("user %s registered as %s", user.id, user.role_code)
    return jsonify({"success": True, "message": "Account created. You can now log in.", "user": user.to_dict()}), 201


@auth_bp.post("/login")
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        raise ValidationError("Login data is invalid.", {"fields": form_errors(form)})

    user = store.get_user_by_email(form.email.data)
    if not user or not user.check_password(form.password.data):
        return jsonify({
            "success": False,
            "error": {"type": "invalid_credentials", "message": "Invalid email or password.", "context": {}},
        }), 401

    login_user(user, remember=bool(form.remember.data))
    return jsonify({"success": True, "message": f"Welcome, {user.name}!", "user": user.to_dict()})


@auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    return jsonify({"success": True, "message": "You have been logged out."})


@auth_bp.get("/me")
@login_required
def me():
    return jsonify({"success": True, "user": current_user.to_dict()})


@auth_bp.get("/roles")
def roles():
    return jsonify({"success": True, "roles": [r.to_dict() for r in store.list_roles()]})
