"""Business-rule errors raised by the lifecycle engine.

Every error carries a user-displayable message plus a ``context`` dict
(current status, requested status, actor role, ids) so callers and tests
can inspect the reason without reading logs. The HTTP layer renders them
with the status code declared on the class.
"""
from typing import Any, Optional


class TaskflowError(Exception):
    status_code = 400
    kind = "error"

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def to_dict(self) -> dict:
        return {"type": self.kind, "message": self.message, "context": self.context}


class NotFound(TaskflowError):
    status_code = 404
    kind = "not_found"


class Forbidden(TaskflowError):
    status_code = 403
    kind = "forbidden"


class InvalidState(TaskflowError):
    status_code = 409
    kind = "invalid_state"


class InvalidTransition(InvalidState):
    kind = "invalid_transition"

    def __init__(self, current, requested, role: str, message: Optional[str] = None):
        current_value = getattr(current, "value", current)
        requested_value = getattr(requested, "value", requested)
        message = message or (
            f'Cannot change status from "{current_value}" to "{requested_value}" as {role}.'
        )
        super().__init__(
            message,
            {"current_status": current_value, "requested_status": requested_value, "role": role},
        )


class ValidationError(TaskflowError):
    status_code = 422
    kind = "validation_error"


class Conflict(TaskflowError):
    status_code = 409
    kind = "conflict"
