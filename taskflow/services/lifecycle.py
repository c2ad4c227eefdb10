# taskflow/services/lifecycle.py
"""Status transition engine.

All status changes of a task go through here (proposal acceptance applies
its own status change under the same lock, see ``proposals.py``). Every
applied change stages exactly one system comment; the executor-rework
cascade stages a second one.
"""
from __future__ import annotations

import logging

from ..errors import InvalidTransition, ValidationError
from ..models.status import TaskStatus
from . import audit, authz, store
from .authz import Actor
from .locks import task_lock
from .result import Result
from .transitions import BY_EVENT, CASCADES, Event

log = logging.getLogger(__name__)


def coerce_status(value) -> TaskStatus:
    try:
        return TaskStatus.coerce(value)
    except ValueError:
        raise ValidationError(
            f'Unknown status "{value}".',
            {"requested_status": value, "allowed": [s.value for s in TaskStatus]},
        )


def _set_status(task, target: TaskStatus, actor: Actor | None, event=None):
    old = task.status
    task.status = target
    return audit.record_status_change(task, old, target, actor, event)


def _apply(task, target: TaskStatus, actor: Actor, transition) -> list:
    """Change status, log it, run any cascade. Caller holds the task lock."""
    event = transition.event if transition else None
    comments = [_set_status(task, target, actor, event)]

    follow_up = CASCADES.get(event)
    if follow_up is not None:
        cascade = BY_EVENT[follow_up]
        comments.append(_set_status(task, cascade.target, None, cascade.event))
        log.info("task %s cascaded %s -> %s", task.id, target.value, cascade.target.value)
    return comments


def apply_transition(task_id, requested_status, actor: Actor) -> Result:
    """Move a task to ``requested_status`` on behalf of ``actor``.

    Admins may set any status. Everyone else needs a table entry for the
    current status whose party they hold. Requesting the current status is a
    no-op.
    """
    target = coerce_status(requested_status)
    with task_lock(task_id):
        task = store.get_task_for_update(task_id)
        old = task.status
        if old == target:
            return Result(message=f'Task status is already "{target.value}".', task=task, changed=False)

        transition = authz.authorize_transition(actor, task, target)
        comments = _apply(task, target, actor, transition)
        store.commit()

    log.info("task %s: %s -> %s by user %s", task_id, old.value, task.status.value, actor.id)
    return Result(
        message=f'Task status updated to "{task.status.value}" and the change was logged.',
        task=task,
        comments=comments,
    )


# ---- named operations ----

_FORBIDDEN_TEXT = {
    Event.MARK_COMPLETED: "Only the assigned executor can mark this task as completed.",
    Event.ACCEPT_WORK: "Only the customer can accept this task.",
    Event.CONFIRM_PAYMENT: "Only the assigned executor can confirm payment.",
    Event.ACCEPT_REWORK: "Only the assigned executor can accept this rework.",
    Event.REQUEST_REVISION_FROM_EXECUTOR: "Only the customer can request a revision from the executor.",
    Event.REQUEST_REVISION_FROM_CUSTOMER: "Only the assigned executor can request a revision from the customer.",
    Event.REWORK_BY_EXECUTOR: "Only the assigned executor can submit a rework.",
    Event.REWORK_BY_CUSTOMER: "Only the customer can submit a rework.",
}

_SUCCESS_TEXT = {
    Event.MARK_COMPLETED: 'Task marked as completed. Status: "{status}".',
    Event.ACCEPT_WORK: 'Task accepted. Status: "{status}". Awaiting payment confirmation.',
    Event.CONFIRM_PAYMENT: 'Payment confirmed. Task is now completed. Status: "{status}".',
    Event.ACCEPT_REWORK: 'Rework accepted. Task is now "{status}".',
}


def run_event(task_id, event: Event, actor: Actor) -> Result:
    """Trigger one named table event; the party check comes before the status check."""
    transition = BY_EVENT[event]
    with task_lock(task_id):
        task = store.get_task_for_update(task_id)
        authz.require_party(actor, task, transition.party, _FORBIDDEN_TEXT.get(event, "Not allowed."))

        old = task.status
        if not transition.starts_from(old):
            allowed = ", ".join(sorted(f'"{s.value}"' for s in transition.sources))
            raise InvalidTransition(
                old,
                transition.target,
                authz.describe_role(actor, task),
                message=(
                    f'Cannot {event.value.replace("_", " ")} from status "{old.value}". '
                    f"It should be one of: {allowed}."
                ),
            )

        comments = _apply(task, transition.target, actor, transition)
        store.commit()

    log.info("task %s: %s (%s -> %s) by user %s", task_id, event.value, old.value, task.status.value, actor.id)
    message = _SUCCESS_TEXT.get(event, 'Task status updated to "{status}".').format(status=task.status.value)
    return Result(message=message, task=task, comments=comments)


def mark_completed_by_executor(task_id, actor: Actor) -> Result:
    return run_event(task_id, Event.MARK_COMPLETED, actor)


def accept_completed_by_customer(task_id, actor: Actor) -> Result:
    return run_event(task_id, Event.ACCEPT_WORK, actor)


def confirm_payment_by_executor(task_id, actor: Actor) -> Result:
    return run_event(task_id, Event.CONFIRM_PAYMENT, actor)


def accept_rework(task_id, actor: Actor) -> Result:
    return run_event(task_id, Event.ACCEPT_REWORK, actor)


def request_revision(task_id, actor: Actor) -> Result:
    """Ask the other party for a revision; who is asked follows from who asks."""
    with task_lock(task_id):
        task = store.get_task_for_update(task_id)
        held = authz.parties(actor, task)
        if authz.Party.EXECUTOR in held and authz.Party.CUSTOMER not in held:
            return run_event(task_id, Event.REQUEST_REVISION_FROM_CUSTOMER, actor)
        return run_event(task_id, Event.REQUEST_REVISION_FROM_EXECUTOR, actor)


def rework(task_id, actor: Actor) -> Result:
    """Acknowledge a revision request addressed to the actor."""
    with task_lock(task_id):
        task = store.get_task_for_update(task_id)
        if task.status == TaskStatus.REVISION_REQUESTED_FROM_CUSTOMER:
            return run_event(task_id, Event.REWORK_BY_CUSTOMER, actor)
        return run_event(task_id, Event.REWORK_BY_EXECUTOR, actor)
