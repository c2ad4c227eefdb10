# taskflow/models/comment.py
from datetime import datetime
from sqlalchemy import event, inspect
from ..extensions import db
from ..errors import InvalidState


class Comment(db.Model):
    __tablename__ = "comment"

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey("task.id"), nullable=False, index=True)
    # NULL author = written by the engine itself (automatic cascades)
    author_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=True, index=True)

    text = db.Column(db.Text, nullable=False)
    attachments = db.Column(db.JSON, nullable=False, default=list)
    is_system_message = db.Column(db.Boolean, nullable=False, default=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    task = db.relationship("Task", back_populates="comments")
    author = db.relationship("User", lazy="joined")

    @property
    def author_name(self) -> str:
        if self.author:
            return self.author.name
        return "System"

    def to_dict(self):
        return {
            "id": self.id,
            "task_id": self.task_id,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "text": self.text,
            "attachments": list(self.attachments or []),
            "is_system_message": bool(self.is_system_message),
            "timestamp": self.created_at.isoformat() if self.created_at else None,
        }


_FROZEN = ("task_id", "author_id", "text", "is_system_message", "created_at")


# Attachments are filled in right after insert, once the comment has an id
@event.listens_for(Comment, "before_update")
def _comments_are_immutable(mapper, connection, target):
    state = inspect(target)
    if not any(state.attrs[name].history.has_changes() for name in _FROZEN):
        return
    raise InvalidState(
        "Comments cannot be edited once posted.",
        {"comment_id": target.id, "is_system_message": bool(target.is_system_message)},
    )
