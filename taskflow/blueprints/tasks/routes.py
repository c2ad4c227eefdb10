# taskflow/blueprints/tasks/routes.py
from flask import jsonify, request
from flask_login import login_required

from ...errors import ValidationError
from ...models.user import ROLE_ADMIN
from ...security import current_actor, roles_required
from ...services import tasks as task_service
from .. import form_errors, respond, uploaded_files
from . import tasks_bp
from .forms import TaskEditForm, TaskForm


@tasks_bp.get("/")
@login_required
def list_tasks():
    items = task_service.list_tasks(request.args.get("status") or None)
    return jsonify({"success": True, "tasks": [t.to_dict(include_names=True) for t in items]})


@tasks_bp.post("/")
@login_required
def create_task():
    form = TaskForm()
    if not form.validate_on_submit():
        raise ValidationError("Task data is invalid.", {"fields": form_errors(form)})
    result = task_service.create_task(
        current_actor(),
        form.title.data,
        form.description.data,
        customer_id=form.customer_id.data,
        category_id=form.category_id.data,
        files=uploaded_files(),
    )
    return respond(result, 201)


@tasks_bp.get("/history")
@login_required
def history():
    items = task_service.completed_tasks()
    return jsonify({"success": True, "tasks": [t.to_dict(include_names=True) for t in items]})


@tasks_bp.get("/form-data")
@login_required
def form_data():
    return jsonify({"success": True, **task_service.form_data()})


@tasks_bp.get("/<int:task_id>")
@login_required
def task_page(task_id):
    return jsonify({"success": True, **task_service.task_page(task_id, current_actor())})


@tasks_bp.post("/<int:task_id>/edit")
@login_required
@roles_required(ROLE_ADMIN)
def edit_task(task_id):
    form = TaskEditForm()
    if not form.validate_on_submit():
        raise ValidationError("Task data is invalid.", {"fields": form_errors(form)})
    fields = form.submitted_fields(request.form)
    if "status" in fields and not fields["status"]:
        fields.pop("status")
    result = task_service.update_task(task_id, current_actor(), fields, files=uploaded_files())
    return respond(result)


@tasks_bp.post("/<int:task_id>/delete")
@login_required
@roles_required(ROLE_ADMIN)
def delete_task(task_id):
    return respond(task_service.delete_task(task_id, current_actor()))
