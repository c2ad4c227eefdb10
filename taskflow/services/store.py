# taskflow/services/store.py
"""Persistence gateway over users, roles, categories, tasks, proposals and comments.

Reads raise NotFound instead of returning None. Writes only stage changes in
the current session and ``commit()`` ends the transaction. Wherever SQL is
flushed, a lost optimistic-concurrency check becomes a Conflict.
"""
import logging
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import Conflict, NotFound
from ..extensions import db
from ..models.comment import Comment
from ..models.proposal import TaskProposal
from ..models.task import Task, TaskCategory
from ..models.user import Role, User

log = logging.getLogger(__name__)


# ---- transactions ----

@contextmanager
def _write_guard():
    """Map lost version checks and constraint races to Conflict, rolling back first."""
    try:
        yield
    except StaleDataError as e:
        db.session.rollback()
        log.warning("stale write rejected: %s", e)
        raise Conflict("The task was changed by someone else. Reload and try again.") from e
    except IntegrityError as e:
        db.session.rollback()
        log.warning("integrity error: %s", e.orig)
        raise Conflict("The change conflicts with existing data. Reload and try again.") from e


def flush():
    with _write_guard():
        db.session.flush()


def commit():
    try:
        with _write_guard():
            db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        log.exception("commit failed")
        raise


def rollback():
    db.session.rollback()


# ---- users & roles ----

def get_user_by_id(user_id) -> User:
    user = db.session.get(User, user_id) if user_id is not None else None
    if not user:
        raise NotFound("User not found.", {"user_id": user_id})
    return user


def get_user_by_email(email: str):
    return User.query.filter(User.email == (email or "").strip().lower()).first()


def list_users():
    return User.query.order_by(User.name.asc()).all()


def list_roles():
    return Role.query.order_by(Role.id.asc()).all()


def get_role_by_code(code: str) -> Role:
    role = Role.query.filter_by(code=code).first()
    if not role:
        raise NotFound(f'Role "{code}" is not configured.', {"role": code})
    return role


def add_user(user: User) -> User:
    db.session.add(user)
    flush()
    return user


# ---- categories ----

def list_categories():
    return TaskCategory.query.order_by(TaskCategory.name.asc()).all()


def get_category_by_id(category_id) -> TaskCategory:
    category = db.session.get(TaskCategory, category_id) if category_id is not None else None
    if not category:
        raise NotFound("Category not found.", {"category_id": category_id})
    return category


# ---- tasks ----

def get_task_by_id(task_id) -> Task:
    task = db.session.get(Task, task_id) if task_id is not None else None
    if not task:
        raise NotFound("Task not found.", {"task_id": task_id})
    return task


def get_task_for_update(task_id) -> Task:
    """Fresh copy of the row, locked where the database supports FOR UPDATE."""
    task = db.session.get(Task, task_id, with_for_update=True, populate_existing=True)
    if not task:
        raise NotFound("Task not found.", {"task_id": task_id})
    return task


def list_tasks(status=None):
    q = Task.query
    if status is not None:
        q = q.filter(Task.status == status)
    return q.order_by(Task.created_at.desc(), Task.id.desc()).all()


def add_task(task: Task) -> Task:
    db.session.add(task)
    flush()
    return task


def update_task(task: Task) -> Task:
    if task.id is None or db.session.get(Task, task.id) is None:
        raise NotFound("Task not found for update.", {"task_id": task.id})
    db.session.add(task)
    flush()
    return task


def delete_task(task_id) -> None:
    """Delete a task; comments and proposals go with it through the ORM cascade."""
    task = get_task_by_id(task_id)
    db.session.delete(task)
    flush()


# ---- proposals ----

def list_proposals_by_task(task_id):
    return (TaskProposal.query
            .filter_by(task_id=task_id)
            .order_by(TaskProposal.created_at.asc(), TaskProposal.id.asc())
            .all())


def get_proposal_by_id(proposal_id) -> TaskProposal:
    proposal = db.session.get(TaskProposal, proposal_id) if proposal_id is not None else None
    if not proposal:
        raise NotFound("Proposal not found.", {"proposal_id": proposal_id})
    return proposal


def find_proposal(task_id, executor_id):
    return TaskProposal.query.filter_by(task_id=task_id, executor_id=executor_id).first()


def upsert_proposal(task_id, executor_id, proposed_cost, proposed_due_date):
    """Insert or overwrite the executor's single proposal for a task.

    Returns ``(proposal, created)``; an overwrite keeps the id.
    """
    proposal = find_proposal(task_id, executor_id)
    created = proposal is None
    if created:
        proposal = TaskProposal(task_id=task_id, executor_id=executor_id)
        db.session.add(proposal)
    proposal.proposed_cost = proposed_cost
    proposal.proposed_due_date = proposed_due_date
    proposal.created_at = datetime.utcnow()
    flush()
    return proposal, created


def delete_proposals_by_task(task_id) -> int:
    with _write_guard():
        return (TaskProposal.query
                .filter_by(task_id=task_id)
                .delete(synchronize_session="fetch"))


# ---- comments ----

def list_comments_by_task(task_id):
    return (Comment.query
            .filter_by(task_id=task_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all())


def add_comment(comment: Comment) -> Comment:
    db.session.add(comment)
    flush()
    return comment
