# taskflow/models/status.py
import enum

from flask_babel import lazy_gettext as _l


class TaskStatus(str, enum.Enum):
    NEW = "new"
    AWAITING_ESTIMATE = "awaiting-estimate"
    IN_PROGRESS = "in-progress"
    REVISION_REQUESTED_FROM_CUSTOMER = "revision-requested-from-customer"
    REVISION_REQUESTED_FROM_EXECUTOR = "revision-requested-from-executor"
    REWORKED_BY_CUSTOMER = "reworked-by-customer"
    REWORKED_BY_EXECUTOR = "reworked-by-executor"
    AWAITING_REVIEW = "awaiting-review"
    ACCEPTED_AWAITING_PAYMENT_CONFIRMATION = "accepted-awaiting-payment-confirmation"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return str(_LABELS[self])

    @property
    def is_terminal(self) -> bool:
        return self is TaskStatus.COMPLETED

    @property
    def is_open_for_proposals(self) -> bool:
        return self in OPEN_FOR_PROPOSALS

    @classmethod
    def coerce(cls, value) -> "TaskStatus":
        """Accept an enum member or its string value; raise ValueError otherwise."""
        if isinstance(value, cls):
            return value
        return cls((value or "").strip())


OPEN_FOR_PROPOSALS = frozenset({TaskStatus.NEW, TaskStatus.AWAITING_ESTIMATE})

_LABELS = {
    TaskStatus.NEW: _l("New"),
    TaskStatus.AWAITING_ESTIMATE: _l("Awaiting estimate"),
    TaskStatus.IN_PROGRESS: _l("In progress"),
    TaskStatus.REVISION_REQUESTED_FROM_CUSTOMER: _l("Revision requested from customer"),
    TaskStatus.REVISION_REQUESTED_FROM_EXECUTOR: _l("Revision requested from executor"),
    TaskStatus.REWORKED_BY_CUSTOMER: _l("Reworked by customer"),
    TaskStatus.REWORKED_BY_EXECUTOR: _l("Reworked by executor"),
    TaskStatus.AWAITING_REVIEW: _l("Awaiting review"),
    TaskStatus.ACCEPTED_AWAITING_PAYMENT_CONFIRMATION: _l("Accepted, awaiting payment confirmation"),
    TaskStatus.COMPLETED: _l("Completed"),
}
