# taskflow/services/comments.py
"""User comments, optionally carrying a status change request.

Internally these are two commands under one task lock: store the comment, then run
``lifecycle.apply_transition``. With ``COMMENT_TRANSITION_ATOMIC`` on, both
share one transaction and a refused change also discards the comment. With
it off, the comment is committed first and stays even when the change is
refused; the error is still returned to the caller.
"""
from __future__ import annotations

import logging
from datetime import datetime

from flask import current_app

from ..errors import TaskflowError, ValidationError
from ..models.comment import Comment
from . import lifecycle, store
from .authz import Actor
from .locks import task_lock
from .result import Result
from .storage_service import store_attachments

log = logging.getLogger(__name__)


def add_comment(task_id, actor: Actor, text: str, files=None, requested_status=None) -> Result:
    text = (text or "").strip()
    if not text:
        raise ValidationError("Comment text cannot be empty.", {"fields": {"text": ["Required."]}})
    target = None
    if requested_status not in (None, "", "none"):
        target = lifecycle.coerce_status(requested_status)
    atomic = current_app.config.get("COMMENT_TRANSITION_ATOMIC", True)

    # Same order as every other writer: task lock first, then database locks
    with task_lock(task_id):
        task = store.get_task_for_update(task_id)
        comment = Comment(
            task_id=task.id,
            author_id=actor.id,
            text=text,
            attachments=[],
            is_system_message=False,
            created_at=datetime.utcnow(),
        )
        store.add_comment(comment)
        if files:
            try:
                comment.attachments = store_attachments(files, task.id, comment.id)
            except ValidationError:
                store.rollback()
                raise
            store.flush()

        if not atomic:
            store.commit()
        log.info("comment %s added to task %s by user %s", comment.id, task.id, actor.id)

        if target is None or target == task.status:
            store.commit()
            return Result(message="Comment added successfully.", task=task, comments=[comment], changed=False)

        try:
            outcome = lifecycle.apply_transition(task.id, target, actor)
        except TaskflowError as e:
            if atomic:
                store.rollback()
                log.info("status change refused, comment on task %s discarded: %s", task_id, e.message)
            else:
                log.info("status change refused, comment %s kept: %s", comment.id, e.message)
            raise
        store.commit()

    return Result(
        message=f"Comment added successfully. {outcome.message}",
        task=outcome.task,
        comments=[comment] + outcome.comments,
        changed=outcome.changed,
    )


def list_comments(task_id):
    store.get_task_by_id(task_id)
    return store.list_comments_by_task(task_id)
