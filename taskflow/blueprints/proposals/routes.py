# taskflow/blueprints/proposals/routes.py
from flask import jsonify
from flask_login import login_required

from ...errors import ValidationError
from ...security import current_actor
from ...services import proposals as proposal_service
from ...services import store, tasks as task_service
from .. import form_errors, respond
from . import proposals_bp
from .forms import ProposalForm


@proposals_bp.get("/tasks/<int:task_id>/proposals")
@login_required
def list_proposals(task_id):
    task_service.require_proposals_visible(store.get_task_by_id(task_id), current_actor())
    items = proposal_service.list_task_proposals(task_id)
    return jsonify({"success": True, "proposals": [p.to_dict() for p in items]})


@proposals_bp.post("/tasks/<int:task_id>/proposals")
@login_required
def submit_proposal(task_id):
    form = ProposalForm()
    if not form.validate_on_submit():
        raise ValidationError("Proposal data is invalid.", {"fields": form_errors(form)})
    result = proposal_service.submit_or_update_proposal(
        task_id,
        current_actor(),
        proposed_cost=form.proposed_cost.data,
        proposed_due_date=form.proposed_due_date.data,
    )
    return respond(result, 201 if result.data["created"] else 200)


@proposals_bp.post("/proposals/<int:proposal_id>/accept")
@login_required
def accept_proposal(proposal_id):
    return respond(proposal_service.accept_proposal(proposal_id, current_actor()))
