# taskflow/services/authz.py
"""Authorization guard.

A task has at most three privileged actors: its customer, its executor and
any admin. Checks here are pure: they look at an :class:`Actor` (resolved
once per request) and a task snapshot, and either return or raise.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..errors import Forbidden, InvalidTransition
from ..models.status import TaskStatus
from ..models.user import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_EXECUTOR
from .transitions import Party, Transition, find_transition, outgoing


@dataclass(frozen=True)
class Actor:
    id: int
    name: str
    role: Optional[str]

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(id=user.id, name=user.name, role=getattr(user, "role_code", None))

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_executor(self) -> bool:
        return self.role == ROLE_EXECUTOR

    @property
    def is_customer(self) -> bool:
        return self.role == ROLE_CUSTOMER


def parties(actor: Actor, task) -> frozenset:
    held = set()
    if actor.is_admin:
        held.add(Party.ADMIN)
    if task.customer_id is not None and task.customer_id == actor.id:
        held.add(Party.CUSTOMER)
    if task.executor_id is not None and task.executor_id == actor.id:
        held.add(Party.EXECUTOR)
    return frozenset(held)


def describe_role(actor: Actor, task) -> str:
    """Human name of the capacity the actor acts in for this task."""
    held = parties(actor, task)
    for party in (Party.ADMIN, Party.CUSTOMER, Party.EXECUTOR):
        if party in held:
            return party.value
    return actor.role or "anonymous"


def require_role(actor: Actor, role: str, message: str):
    if actor.role != role:
        raise Forbidden(message, {"role": actor.role, "required_role": role})


def require_admin(actor: Actor, message: str = "Only administrators can do this."):
    if not actor.is_admin:
        raise Forbidden(message, {"role": actor.role, "required_role": ROLE_ADMIN})


def require_party(actor: Actor, task, party: Party, message: str):
    """Admins pass; everyone else must hold exactly the named party."""
    held = parties(actor, task)
    if Party.ADMIN in held or party in held:
        return
    raise Forbidden(message, {"task_id": task.id, "role": describe_role(actor, task), "required_party": party.value})


def authorize_transition(actor: Actor, task, target: TaskStatus) -> Optional[Transition]:
    """Check a requested status change.

    Returns the matching table entry, or None when an admin bypasses the
    table. Raises Forbidden for actors with no relationship to the task and
    InvalidTransition when the table has no entry for this actor.
    """
    held = parties(actor, task)
    if Party.ADMIN in held:
        return find_transition(task.status, target)
    if not held:
        raise Forbidden(
            f"You are not a participant of task #{task.id}.",
            {"task_id": task.id, "role": actor.role, "current_status": task.status.value,
             "requested_status": target.value},
        )
    transition = find_transition(task.status, target)
    if transition is None or transition.party not in held:
        raise InvalidTransition(task.status, target, describe_role(actor, task))
    return transition


def available_transitions(actor: Actor, task) -> list[TaskStatus]:
    """Statuses the actor may request for this task right now."""
    held = parties(actor, task)
    if Party.ADMIN in held:
        return [s for s in TaskStatus if s != task.status]
    return [t.target for t in outgoing(task.status) if t.party in held]
