from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Result:
    """Successful outcome of an engine operation."""
    message: str
    task: Optional[Any] = None
    changed: bool = True
    comments: list = field(default_factory=list)
    data: dict = field(default_factory=dict)

    def to_dict(self):
        d = {"success": True, "message": self.message, "changed": self.changed}
        if self.task is not None:
            d["task"] = self.task.to_dict()
        if self.comments:
            d["comments"] = [c.to_dict() for c in self.comments]
        d.update(self.data)
        return d
