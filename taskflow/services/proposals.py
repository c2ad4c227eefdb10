# taskflow/services/proposals.py
"""Proposal manager: the bidding phase before a task has an executor."""
from __future__ import annotations

import logging
from datetime import date

from ..errors import Conflict, Forbidden, InvalidState, InvalidTransition, NotFound, ValidationError
from ..models.user import ROLE_EXECUTOR
from . import audit, authz, store
from .authz import Actor
from .locks import task_lock
from .result import Result
from .transitions import BY_EVENT, Event, Party

log = logging.getLogger(__name__)


def _validate_terms(proposed_cost, proposed_due_date):
    if proposed_cost is None and proposed_due_date is None:
        raise ValidationError(
            "Either proposed cost or proposed due date must be provided.",
            {"fields": {"proposed_cost": ["Provide a cost or a due date."]}},
        )
    if proposed_cost is not None:
        try:
            proposed_cost = float(proposed_cost)
        except (TypeError, ValueError):
            raise ValidationError("Proposed cost must be a number.", {"proposed_cost": proposed_cost})
        if proposed_cost <= 0:
            raise ValidationError(
                "Proposed cost must be a positive number.", {"proposed_cost": proposed_cost}
            )
    if proposed_due_date is not None and not isinstance(proposed_due_date, date):
        raise ValidationError("Proposed due date must be a date.", {"proposed_due_date": str(proposed_due_date)})
    return proposed_cost, proposed_due_date


def submit_or_update_proposal(task_id, actor: Actor, proposed_cost=None, proposed_due_date=None) -> Result:
    """Create the executor's offer for a task, or overwrite it in place."""
    authz.require_role(actor, ROLE_EXECUTOR, "Only executors can submit proposals.")
    proposed_cost, proposed_due_date = _validate_terms(proposed_cost, proposed_due_date)

    with task_lock(task_id):
        task = store.get_task_for_update(task_id)
        if task.executor_id is not None:
            raise InvalidState(
                "Task already has an assigned executor. Proposals cannot be submitted or edited.",
                {"task_id": task.id, "current_status": task.status.value, "role": actor.role},
            )
        if not task.status.is_open_for_proposals:
            raise InvalidState(
                "Task is not open for proposals at this stage.",
                {"task_id": task.id, "current_status": task.status.value, "role": actor.role},
            )

        proposal, created = store.upsert_proposal(task.id, actor.id, proposed_cost, proposed_due_date)
        store.commit()

    log.info("proposal %s %s for task %s by executor %s",
             proposal.id, "created" if created else "updated", task_id, actor.id)
    message = "Proposal submitted successfully." if created else "Proposal updated successfully."
    return Result(message=message, changed=True, data={"proposal": proposal.to_dict(), "created": created})


def accept_proposal(proposal_id, actor: Actor) -> Result:
    """Assign the proposal's executor and terms to the task and close bidding.

    Everything happens in one transaction under the task lock: terms copied,
    executor set, status moved to in-progress, one system comment staged,
    every proposal of the task deleted.
    """
    task_id = store.get_proposal_by_id(proposal_id).task_id
    transition = BY_EVENT[Event.ACCEPT_PROPOSAL]

    with task_lock(task_id):
        task = store.get_task_for_update(task_id)
        authz.require_party(actor, task, Party.CUSTOMER, "Only the task customer can accept proposals.")

        if task.executor_id is not None:
            raise Conflict(
                "Task already has an assigned executor.",
                {"task_id": task.id, "executor_id": task.executor_id, "current_status": task.status.value},
            )
        try:
            proposal = store.get_proposal_by_id(proposal_id)
        except NotFound:
            raise Conflict("This proposal is no longer available.", {"task_id": task.id, "proposal_id": proposal_id})
        if proposal.task_id != task.id:
            raise Conflict("This proposal is no longer available.", {"task_id": task.id, "proposal_id": proposal_id})

        old = task.status
        if not transition.starts_from(old):
            raise InvalidTransition(old, transition.target, authz.describe_role(actor, task))

        customer = store.get_user_by_id(task.customer_id)
        who = audit.actor_label(actor, task)
        executor = store.get_user_by_id(proposal.executor_id)
        if executor.role_code != ROLE_EXECUTOR:
            raise Forbidden("The proposing user is no longer an executor.", {"executor_id": executor.id})

        task.executor_id = proposal.executor_id
        task.cost = proposal.proposed_cost
        task.due_date = proposal.proposed_due_date
        task.status = transition.target

        comment = audit.record_system_comment(
            task,
            audit.assignment_text(who, customer.name, executor.name, proposal.proposed_cost,
                                  proposal.proposed_due_date, old, task.status,
                                  on_behalf=actor.id != customer.id),
            author_id=actor.id,
        )
        dropped = store.delete_proposals_by_task(task.id)
        store.commit()

    log.info("task %s assigned to executor %s by user %s (%s proposals closed)",
             task_id, task.executor_id, actor.id, dropped)
    return Result(message="Proposal accepted and executor assigned.", task=task, comments=[comment])


def list_task_proposals(task_id):
    store.get_task_by_id(task_id)
    return store.list_proposals_by_task(task_id)
