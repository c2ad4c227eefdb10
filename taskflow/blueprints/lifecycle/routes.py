# taskflow/blueprints/lifecycle/routes.py
from flask import request
from flask_login import login_required

from ...errors import ValidationError
from ...security import current_actor
from ...services import lifecycle
from .. import respond
from . import lifecycle_bp


@lifecycle_bp.post("/<int:task_id>/status")
@login_required
def change_status(task_id):
    status = (request.form.get("status") or "").strip()
    if not status:
        raise ValidationError("Status is required.", {"fields": {"status": ["This field is required."]}})
    return respond(lifecycle.apply_transition(task_id, status, current_actor()))


@lifecycle_bp.post("/<int:task_id>/complete")
@login_required
def mark_completed(task_id):
    return respond(lifecycle.mark_completed_by_executor(task_id, current_actor()))


@lifecycle_bp.post("/<int:task_id>/accept")
@login_required
def accept_completed(task_id):
    return respond(lifecycle.accept_completed_by_customer(task_id, current_actor()))


@lifecycle_bp.post("/<int:task_id>/confirm-payment")
@login_required
def confirm_payment(task_id):
    return respond(lifecycle.confirm_payment_by_executor(task_id, current_actor()))


@lifecycle_bp.post("/<int:task_id>/accept-rework")
@login_required
def accept_rework(task_id):
    return respond(lifecycle.accept_rework(task_id, current_actor()))


@lifecycle_bp.post("/<int:task_id>/request-revision")
@login_required
def request_revision(task_id):
    return respond(lifecycle.request_revision(task_id, current_actor()))


@lifecycle_bp.post("/<int:task_id>/rework")
@login_required
def rework(task_id):
    return respond(lifecycle.rework(task_id, current_actor()))
