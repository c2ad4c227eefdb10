# taskflow/models/task.py
from datetime import datetime
from ..extensions import db
from .status import TaskStatus


class TaskCategory(db.Model):
    __tablename__ = "task_category"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), unique=True, nullable=False)

    def to_dict(self):
        return {"id": self.id, "name": self.name}


class Task(db.Model):
    __tablename__ = "task"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)

    status = db.Column(
        db.Enum(
            TaskStatus,
            name="task_status",
            native_enum=False,
            length=64,
            values_callable=lambda enum_cls: [m.value for m in enum_cls],
            validate_strings=True,
        ),
        nullable=False,
        default=TaskStatus.NEW,
        index=True,
    )
    due_date = db.Column(db.Date)
    cost = db.Column(db.Float)

    author_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)
    executor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=True, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("task_category.id"), nullable=True, index=True)

    # JSON list of {"path", "name", "kind"}; always reassigned, never mutated in place
    attachments = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    # Bumped on every UPDATE; a write against a stale version raises StaleDataError
    version = db.Column(db.Integer, nullable=False)
    __mapper_args__ = {"version_id_col": version}

    author = db.relationship("User", foreign_keys=[author_id])
    customer = db.relationship("User", foreign_keys=[customer_id])
    executor = db.relationship("User", foreign_keys=[executor_id])
    category = db.relationship("TaskCategory")

    comments = db.relationship(
        "Comment",
        back_populates="task",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="[Comment.created_at, Comment.id]",
    )
    proposals = db.relationship(
        "TaskProposal",
        back_populates="task",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def category_name(self) -> str:
        return self.category.name if self.category else "Uncategorized"

    def to_dict(self, include_names=False):
        d = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value if self.status else None,
            "status_label": self.status.label if self.status else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "cost": self.cost,
            "author_id": self.author_id,
            "customer_id": self.customer_id,
            "executor_id": self.executor_id,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "attachments": list(self.attachments or []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "version": self.version,
        }
        if include_names:
            d.update({
                "author_name": self.author.name if self.author else "Unknown",
                "customer_name": self.customer.name if self.customer else "Unknown",
                "executor_name": self.executor.name if self.executor else "N/A",
            })
        return d
