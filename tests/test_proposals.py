from datetime import date

import pytest

from taskflow.errors import Conflict, Forbidden, InvalidState, NotFound, ValidationError
from taskflow.models.status import TaskStatus
from taskflow.services import proposals, store, tasks

from conftest import status_of, system_comments


def test_accepting_a_proposal_assigns_the_executor(make_task, propose, users):
    task_id = make_task()
    proposal_id = propose(task_id, cost=100, due=date(2025, 1, 1))
    propose(task_id, executor="executor2", cost=80)

    result = proposals.accept_proposal(proposal_id, users["customer"])

    task = store.get_task_by_id(task_id)
    assert result.message == "Proposal accepted and executor assigned."
    assert task.status is TaskStatus.IN_PROGRESS
    assert task.cost == 100
    assert task.due_date == date(2025, 1, 1)
    assert task.executor_id == users["executor"].id
    assert store.list_proposals_by_task(task_id) == []

    logged = system_comments(task_id)
    assert len(logged) == 1
    assert "Alice Customer" in logged[0].text
    assert "Bob Executor" in logged[0].text
    assert "$100.00" in logged[0].text
    assert "2025-01-01" in logged[0].text
    assert '"new" to "in-progress"' in logged[0].text


def test_resubmission_overwrites_in_place(make_task, propose, users):
    task_id = make_task()
    first = proposals.submit_or_update_proposal(task_id, users["executor"], proposed_cost=100)
    second = proposals.submit_or_update_proposal(
        task_id, users["executor"], proposed_cost=120, proposed_due_date=date(2025, 2, 1)
    )

    assert first.message == "Proposal submitted successfully."
    assert second.message == "Proposal updated successfully."
    assert first.data["proposal"]["id"] == second.data["proposal"]["id"]
    [stored] = store.list_proposals_by_task(task_id)
    assert stored.proposed_cost == 120
    assert stored.proposed_due_date == date(2025, 2, 1)


def test_proposal_on_awaiting_estimate_task(make_task, force_status, users):
    task_id = make_task()
    force_status(task_id, "awaiting-estimate")
    result = proposals.submit_or_update_proposal(task_id, users["executor"], proposed_due_date=date(2025, 3, 1))
    assert result.data["proposal"]["proposed_cost"] is None


@pytest.mark.parametrize("cost, due", [(None, None), (0, None), (-5, date(2025, 1, 1)), ("abc", None)])
def test_invalid_terms_are_rejected(make_task, users, cost, due):
    task_id = make_task()
    with pytest.raises(ValidationError):
        proposals.submit_or_update_proposal(task_id, users["executor"], proposed_cost=cost, proposed_due_date=due)
    assert store.list_proposals_by_task(task_id) == []


def test_only_executors_can_propose(make_task, users):
    task_id = make_task()
    for key in ("customer", "admin"):
        with pytest.raises(Forbidden):
            proposals.submit_or_update_proposal(task_id, users[key], proposed_cost=10)


def test_proposal_for_missing_task(ctx, users):
    with pytest.raises(NotFound):
        proposals.submit_or_update_proposal(999, users["executor"], proposed_cost=10)


def test_no_proposals_once_assigned(assigned_task, users):
    with pytest.raises(InvalidState) as exc:
        proposals.submit_or_update_proposal(assigned_task, users["executor2"], proposed_cost=10)
    assert exc.value.context["current_status"] == "in-progress"


def test_no_proposals_outside_open_statuses(make_task, force_status, users):
    task_id = make_task()
    force_status(task_id, "awaiting-review")
    with pytest.raises(InvalidState):
        proposals.submit_or_update_proposal(task_id, users["executor"], proposed_cost=10)


def test_non_customer_cannot_accept(make_task, propose, users):
    task_id = make_task()
    proposal_id = propose(task_id)

    for key in ("other", "executor", "executor2"):
        with pytest.raises(Forbidden):
            proposals.accept_proposal(proposal_id, users[key])

    task = store.get_task_by_id(task_id)
    assert task.executor_id is None
    assert status_of(task_id) is TaskStatus.NEW
    assert [p.id for p in store.list_proposals_by_task(task_id)] == [proposal_id]
    assert system_comments(task_id) == []


def test_admin_can_accept_for_the_customer(make_task, propose, users):
    task_id = make_task()
    proposals.accept_proposal(propose(task_id), users["admin"])
    assert store.get_task_by_id(task_id).executor_id == users["executor"].id


def test_proposal_closed_by_acceptance_is_gone(make_task, propose, users):
    task_id = make_task()
    first = propose(task_id)
    second = propose(task_id, executor="executor2")
    proposals.accept_proposal(first, users["customer"])

    # accepted proposals are deleted with the rest
    with pytest.raises(NotFound):
        proposals.accept_proposal(second, users["customer"])
    assert store.get_task_by_id(task_id).executor_id == users["executor"].id


def test_accept_unknown_proposal(ctx, users):
    with pytest.raises(NotFound):
        proposals.accept_proposal(12345, users["customer"])


def test_accept_when_already_assigned_by_admin_edit(make_task, propose, users):
    task_id = make_task()
    proposal_id = propose(task_id, executor="executor2")
    tasks.update_task(task_id, users["admin"], {"executor_id": users["executor"].id})

    with pytest.raises(Conflict):
        proposals.accept_proposal(proposal_id, users["customer"])


def test_list_task_proposals_includes_executor(make_task, propose):
    task_id = make_task()
    propose(task_id)
    [p] = proposals.list_task_proposals(task_id)
    d = p.to_dict()
    assert d["executor_name"] == "Bob Executor"
    assert d["executor_email"] == "bob@test.com"


def test_admin_acceptance_is_logged_as_admin(make_task, propose, users):
    task_id = make_task()
    proposals.accept_proposal(propose(task_id), users["admin"])
    [logged] = system_comments(task_id)
    assert logged.text.startswith("Admin Dana Admin assigned executor Bob Executor to the task")
    assert "on behalf of customer Alice Customer" in logged.text
