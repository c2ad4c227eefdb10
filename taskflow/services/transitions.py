# taskflow/services/transitions.py
"""The one authoritative task transition table.

Each entry names the event, the statuses it may start from, the status it
ends in, and the single party allowed to trigger it. ``(source, target)``
pairs are unique across the table, so a requested status change maps to at
most one event.
"""
import enum
from dataclasses import dataclass

from ..models.status import TaskStatus as S


class Party(str, enum.Enum):
    CUSTOMER = "customer"
    EXECUTOR = "executor"
    ADMIN = "admin"
    SYSTEM = "system"


class Event(str, enum.Enum):
    ACCEPT_PROPOSAL = "accept_proposal"
    REQUEST_REVISION_FROM_EXECUTOR = "request_revision_from_executor"
    REQUEST_REVISION_FROM_CUSTOMER = "request_revision_from_customer"
    REWORK_BY_EXECUTOR = "rework_by_executor"
    REWORK_BY_CUSTOMER = "rework_by_customer"
    SUBMIT_REWORK_FOR_REVIEW = "submit_rework_for_review"
    MARK_COMPLETED = "mark_completed"
    ACCEPT_WORK = "accept_work"
    CONFIRM_PAYMENT = "confirm_payment"
    ACCEPT_REWORK = "accept_rework"


@dataclass(frozen=True)
class Transition:
    event: Event
    sources: frozenset
    target: S
    party: Party

    def starts_from(self, status: S) -> bool:
        return status in self.sources


TRANSITIONS = (
    Transition(Event.ACCEPT_PROPOSAL, frozenset({S.NEW, S.AWAITING_ESTIMATE}), S.IN_PROGRESS, Party.CUSTOMER),
    Transition(
        Event.REQUEST_REVISION_FROM_EXECUTOR,
        frozenset({S.IN_PROGRESS, S.AWAITING_REVIEW, S.REWORKED_BY_EXECUTOR}),
        S.REVISION_REQUESTED_FROM_EXECUTOR,
        Party.CUSTOMER,
    ),
    Transition(
        Event.REQUEST_REVISION_FROM_CUSTOMER,
        frozenset({S.IN_PROGRESS}),
        S.REVISION_REQUESTED_FROM_CUSTOMER,
        Party.EXECUTOR,
    ),
    Transition(
        Event.REWORK_BY_EXECUTOR,
        frozenset({S.REVISION_REQUESTED_FROM_EXECUTOR}),
        S.REWORKED_BY_EXECUTOR,
        Party.EXECUTOR,
    ),
    Transition(
        Event.REWORK_BY_CUSTOMER,
        frozenset({S.REVISION_REQUESTED_FROM_CUSTOMER}),
        S.REWORKED_BY_CUSTOMER,
        Party.CUSTOMER,
    ),
    Transition(
        Event.SUBMIT_REWORK_FOR_REVIEW,
        frozenset({S.REWORKED_BY_EXECUTOR}),
        S.AWAITING_REVIEW,
        Party.SYSTEM,
    ),
    Transition(
        Event.MARK_COMPLETED,
        frozenset({S.IN_PROGRESS, S.REWORKED_BY_CUSTOMER}),
        S.AWAITING_REVIEW,
        Party.EXECUTOR,
    ),
    Transition(
        Event.ACCEPT_WORK,
        frozenset({S.AWAITING_REVIEW, S.REWORKED_BY_EXECUTOR}),
        S.ACCEPTED_AWAITING_PAYMENT_CONFIRMATION,
        Party.CUSTOMER,
    ),
    Transition(
        Event.CONFIRM_PAYMENT,
        frozenset({S.ACCEPTED_AWAITING_PAYMENT_CONFIRMATION}),
        S.COMPLETED,
        Party.EXECUTOR,
    ),
    Transition(
        Event.ACCEPT_REWORK,
        frozenset({S.REWORKED_BY_CUSTOMER}),
        S.IN_PROGRESS,
        Party.EXECUTOR,
    ),
)

BY_EVENT = {t.event: t for t in TRANSITIONS}

# Events a user may trigger by simply requesting the target status.
# Accepting a proposal needs a proposal; the review cascade is engine-internal.
MANUAL_EVENTS = frozenset(BY_EVENT) - {Event.ACCEPT_PROPOSAL, Event.SUBMIT_REWORK_FOR_REVIEW}

# Entered by the engine right after the event that leads into it.
CASCADES = {
    Event.REWORK_BY_EXECUTOR: Event.SUBMIT_REWORK_FOR_REVIEW,
}


def _index():
    index = {}
    for t in TRANSITIONS:
        for source in t.sources:
            key = (source, t.target)
            if key in index:
                raise RuntimeError(f"duplicate transition {source.value} -> {t.target.value}")
            index[key] = t
    return index


BY_EDGE = _index()


def find_transition(source: S, target: S, *, manual_only=True):
    t = BY_EDGE.get((source, target))
    if t is None or (manual_only and t.event not in MANUAL_EVENTS):
        return None
    return t


def outgoing(source: S, *, manual_only=True):
    return [
        t for t in TRANSITIONS
        if t.starts_from(source) and (not manual_only or t.event in MANUAL_EVENTS)
    ]
