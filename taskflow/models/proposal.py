from datetime import datetime
from ..extensions import db


class TaskProposal(db.Model):
    __tablename__ = "task_proposal"

    id = db.Column(db.Integer, primary_key=True)
    task_id = db.Column(db.Integer, db.ForeignKey("task.id"), nullable=False, index=True)
    executor_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)

    proposed_cost = db.Column(db.Float)
    proposed_due_date = db.Column(db.Date)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    task = db.relationship("Task", back_populates="proposals")
    executor = db.relationship("User", lazy="joined")

    # one live offer per executor per task
    __table_args__ = (
        db.UniqueConstraint("task_id", "executor_id", name="uq_task_proposal_task_executor"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "task_id": self.task_id,
            "executor_id": self.executor_id,
            "executor_name": self.executor.name if self.executor else "Unknown executor",
            "executor_email": self.executor.email if self.executor else "",
            "proposed_cost": self.proposed_cost,
            "proposed_due_date": self.proposed_due_date.isoformat() if self.proposed_due_date else None,
            "timestamp": self.created_at.isoformat() if self.created_at else None,
        }
