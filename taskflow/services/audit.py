# taskflow/services/audit.py
"""System comments: the append-only record of every status change."""
import logging
from datetime import datetime

from ..models.comment import Comment
from . import authz, store
from .transitions import Event

log = logging.getLogger(__name__)


# {who} is the actor's capacity on the task followed by their name
_EVENT_TEXT = {
    Event.MARK_COMPLETED: (
        '{who} marked the task as done. Status changed from "{old}" to "{new}". '
        "Awaiting review by the customer."
    ),
    Event.ACCEPT_WORK: (
        '{who} accepted the completed work. Status changed from "{old}" to "{new}". '
        "Awaiting payment confirmation by the executor."
    ),
    Event.CONFIRM_PAYMENT: (
        '{who} confirmed receipt of payment. Status changed from "{old}" to "{new}". '
        "The task is completed."
    ),
    Event.ACCEPT_REWORK: '{who} accepted the rework from the customer. Status changed from "{old}" to "{new}".',
    Event.REQUEST_REVISION_FROM_EXECUTOR: (
        '{who} requested a revision from the executor. Status changed from "{old}" to "{new}".'
    ),
    Event.REQUEST_REVISION_FROM_CUSTOMER: (
        '{who} requested a revision from the customer. Status changed from "{old}" to "{new}".'
    ),
    Event.REWORK_BY_EXECUTOR: '{who} reworked the task. Status changed from "{old}" to "{new}".',
    Event.REWORK_BY_CUSTOMER: '{who} reworked the task. Status changed from "{old}" to "{new}".',
    Event.SUBMIT_REWORK_FOR_REVIEW: (
        'The reworked result was submitted for review automatically. Status changed from "{old}" to "{new}".'
    ),
}

_DEFAULT_TEXT = '{who} changed the task status from "{old}" to "{new}".'


def actor_label(actor, task) -> str:
    """``"Executor Bob Executor"``, ``"Admin Dana Admin"``, or ``"System"``."""
    if actor is None:
        return "System"
    return f"{authz.describe_role(actor, task).capitalize()} {actor.name}"


def status_change_text(old, new, who: str, event=None) -> str:
    template = _EVENT_TEXT.get(event, _DEFAULT_TEXT)
    return template.format(who=who, old=old.value, new=new.value)


def assignment_text(who, customer_name, executor_name, cost, due_date, old, new, on_behalf=False) -> str:
    cost_txt = f"${cost:,.2f}" if cost is not None else "N/A"
    due_txt = due_date.isoformat() if due_date else "N/A"
    assigned = f"{who} assigned executor {executor_name} to the task"
    if on_behalf:
        assigned += f" on behalf of customer {customer_name}"
    return (
        f"{assigned}. "
        f"Terms: cost - {cost_txt}, due date - {due_txt}. "
        f'Status changed from "{old.value}" to "{new.value}".'
    )


def record_system_comment(task, text: str, author_id=None) -> Comment:
    """Stage a system comment for ``task``; committed with the surrounding change."""
    comment = Comment(
        task_id=task.id,
        author_id=author_id,
        text=text,
        attachments=[],
        is_system_message=True,
        created_at=datetime.utcnow(),
    )
    store.add_comment(comment)
    log.info("audit task=%s author=%s: %s", task.id, author_id, text)
    return comment


def record_status_change(task, old, new, actor=None, event=None) -> Comment:
    """``actor`` None means the engine itself made the change."""
    return record_system_comment(
        task,
        status_change_text(old, new, actor_label(actor, task), event),
        author_id=actor.id if actor is not None else None,
    )
