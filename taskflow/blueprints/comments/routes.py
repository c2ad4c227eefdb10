# taskflow/blueprints/comments/routes.py
from flask import jsonify
from flask_login import login_required

from ...errors import ValidationError
from ...security import current_actor
from ...services import authz, comments, store
from .. import form_errors, respond, uploaded_files
from . import comments_bp
from .forms import CommentForm


@comments_bp.get("/<int:task_id>/comments")
@login_required
def list_comments(task_id):
    task = store.get_task_by_id(task_id)
    return jsonify({
        "success": True,
        "comments": [c.to_dict() for c in comments.list_comments(task_id)],
        "available_transitions": [s.value for s in authz.available_transitions(current_actor(), task)],
    })


@comments_bp.post("/<int:task_id>/comments")
@login_required
def add_comment(task_id):
    form = CommentForm()
    if not form.validate_on_submit():
        raise ValidationError("Comment data is invalid.", {"fields": form_errors(form)})
    result = comments.add_comment(
        task_id,
        current_actor(),
        form.text.data,
        files=uploaded_files(),
        requested_status=form.new_status.data or None,
    )
    return respond(result, 201)
