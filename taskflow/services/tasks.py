# taskflow/services/tasks.py
"""Task creation, the admin edit/delete path and read views."""
from __future__ import annotations

import logging
from datetime import date, datetime

from ..errors import Forbidden, ValidationError
from ..models.status import TaskStatus
from ..models.task import Task
from ..models.user import ROLE_CUSTOMER, ROLE_EXECUTOR
from . import audit, authz, lifecycle, store
from .authz import Actor
from .locks import task_lock
from .result import Result
from .storage_service import store_attachments

log = logging.getLogger(__name__)

_EDITABLE = ("title", "description", "status", "customer_id", "executor_id",
             "category_id", "cost", "due_date")


def _check_text(title, description) -> dict:
    errors = {}
    if len((title or "").strip()) < 3:
        errors["title"] = ["Title must be at least 3 characters."]
    if len((description or "").strip()) < 10:
        errors["description"] = ["Description must be at least 10 characters."]
    return errors


def _user_with_role(user_id, role: str, field: str):
    user = store.get_user_by_id(user_id)
    if user.role_code != role:
        raise ValidationError(
            f"Selected user is not a {role}.",
            {"fields": {field: [f"Must be a {role}."]}, "user_id": user.id, "role": user.role_code},
        )
    return user


def create_task(actor: Actor, title, description, customer_id=None, category_id=None, files=None) -> Result:
    errors = _check_text(title, description)
    if errors:
        raise ValidationError("Task data is invalid.", {"fields": errors})

    if customer_id in (None, "", 0):
        if not actor.is_customer:
            raise ValidationError("A customer must be selected.", {"fields": {"customer_id": ["Required."]}})
        customer_id = actor.id
    customer = _user_with_role(customer_id, ROLE_CUSTOMER, "customer_id")
    category = store.get_category_by_id(category_id) if category_id not in (None, "", 0) else None

    task = Task(
        title=title.strip(),
        description=description.strip(),
        status=TaskStatus.NEW,
        author_id=actor.id,
        customer_id=customer.id,
        category_id=category.id if category else None,
        attachments=[],
        created_at=datetime.utcnow(),
    )
    store.add_task(task)
    if files:
        task.attachments = store_attachments(files, task.id)
    store.commit()

    log.info("task %s created by user %s for customer %s", task.id, actor.id, customer.id)
    return Result(message="Task created successfully.", task=task)


def _clean_fields(task, fields: dict) -> dict:
    """Validate an edit against the current task; returns attribute -> new value."""
    errors = _check_text(fields.get("title", task.title), fields.get("description", task.description))
    if errors:
        raise ValidationError("Task data is invalid.", {"fields": errors})

    changes = {}
    if "title" in fields:
        changes["title"] = fields["title"].strip()
    if "description" in fields:
        changes["description"] = fields["description"].strip()
    if "customer_id" in fields:
        changes["customer_id"] = _user_with_role(fields["customer_id"], ROLE_CUSTOMER, "customer_id").id
    if "executor_id" in fields:
        executor_id = fields["executor_id"]
        changes["executor_id"] = (
            None if executor_id in (None, "", 0)
            else _user_with_role(executor_id, ROLE_EXECUTOR, "executor_id").id
        )
    if "category_id" in fields:
        category_id = fields["category_id"]
        changes["category_id"] = (
            None if category_id in (None, "", 0) else store.get_category_by_id(category_id).id
        )
    if "cost" in fields:
        cost = fields["cost"]
        if cost is not None:
            try:
                cost = float(cost)
            except (TypeError, ValueError):
                cost = 0
            if cost <= 0:
                raise ValidationError("Cost must be a positive number.", {"fields": {"cost": ["Must be > 0."]}})
        changes["cost"] = cost
    if "due_date" in fields:
        due = fields["due_date"]
        if due is not None and not isinstance(due, date):
            raise ValidationError("Due date must be a date.", {"fields": {"due_date": ["Invalid date."]}})
        changes["due_date"] = due
    if "status" in fields:
        changes["status"] = lifecycle.coerce_status(fields["status"])
    return changes


def update_task(task_id, actor: Actor, fields: dict, files=None) -> Result:
    """Admin edit of any task field. A status change is audited like any other."""
    authz.require_admin(actor, "Only administrators can edit tasks.")
    unknown = set(fields) - set(_EDITABLE)
    if unknown:
        raise ValidationError("Unknown task fields.", {"fields": sorted(unknown)})

    with task_lock(task_id):
        task = store.get_task_for_update(task_id)
        changes = _clean_fields(task, fields)
        old = task.status
        new = changes.pop("status", old)

        for attr, value in changes.items():
            setattr(task, attr, value)
        comments = []
        if new != old:
            task.status = new
            comments.append(audit.record_status_change(task, old, new, actor))
        if files:
            task.attachments = store_attachments(files, task.id)
        store.update_task(task)
        store.commit()

    log.info("task %s edited by admin %s", task_id, actor.id)
    return Result(message="Task updated successfully.", task=task, comments=comments)


def delete_task(task_id, actor: Actor) -> Result:
    authz.require_admin(actor, "Only administrators can delete tasks.")
    with task_lock(task_id):
        store.delete_task(task_id)
        store.commit()
    log.info("task %s deleted by admin %s", task_id, actor.id)
    return Result(message="Task deleted successfully.", data={"task_id": task_id})


def task_details(task_id) -> dict:
    return store.get_task_by_id(task_id).to_dict(include_names=True)


def task_page(task_id, actor: Actor) -> dict:
    """Everything the task page shows, shaped for the viewer."""
    task = store.get_task_by_id(task_id)
    can_see_proposals = can_view_proposals(task, actor)
    return {
        "task": task.to_dict(include_names=True),
        "comments": [c.to_dict() for c in store.list_comments_by_task(task.id)],
        "proposals": (
            [p.to_dict() for p in store.list_proposals_by_task(task.id)] if can_see_proposals else []
        ),
        "available_transitions": [s.value for s in authz.available_transitions(actor, task)],
        "roles": [r.to_dict() for r in store.list_roles()],
        "categories": [c.to_dict() for c in store.list_categories()],
    }


def form_data() -> dict:
    """Choices for the create and edit forms."""
    users = store.list_users()
    return {
        "customers": [{"id": u.id, "name": u.name} for u in users if u.role_code == ROLE_CUSTOMER],
        "executors": [{"id": u.id, "name": u.name} for u in users if u.role_code == ROLE_EXECUTOR],
        "categories": [c.to_dict() for c in store.list_categories()],
        "roles": [r.to_dict() for r in store.list_roles()],
    }


def list_tasks(status=None):
    if status is not None:
        status = lifecycle.coerce_status(status)
    return store.list_tasks(status)


def completed_tasks():
    return store.list_tasks(TaskStatus.COMPLETED)


def can_view_proposals(task, actor: Actor) -> bool:
    return actor.is_admin or actor.is_executor or task.customer_id == actor.id


def require_proposals_visible(task, actor: Actor):
    if can_view_proposals(task, actor):
        return
    raise Forbidden("You cannot view proposals for this task.", {"task_id": task.id, "role": actor.role})
