import io

import pytest

from conftest import TEST_PASSWORD


@pytest.fixture
def customer(login):
    return login("customer")


@pytest.fixture
def executor(login):
    return login("executor")


@pytest.fixture
def admin(login):
    return login("admin")


def create_task(client):
    resp = client.post("/tasks/", data={"title": "Landing page", "description": "Build a landing page for the product."})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["task"]["id"]


def assign(customer, executor, task_id):
    resp = executor.post(f"/tasks/{task_id}/proposals", data={"proposed_cost": "100", "proposed_due_date": "2025-01-01"})
    assert resp.status_code == 201, resp.get_json()
    proposal_id = resp.get_json()["proposal"]["id"]
    resp = customer.post(f"/proposals/{proposal_id}/accept")
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


def test_register_login_me(app, users):
    client = app.test_client()
    resp = client.post("/auth/register", data={
        "name": "New Person", "email": "New@Test.com", "role": "executor",
        "password": "hunter22", "password2": "hunter22",
    })
    assert resp.status_code == 201
    assert resp.get_json()["user"]["role"] == "executor"

    dup = client.post("/auth/register", data={
        "name": "Again", "email": "new@test.com", "role": "customer",
        "password": "hunter22", "password2": "hunter22",
    })
    assert dup.status_code == 422
    assert "email" in dup.get_json()["error"]["context"]["fields"]

    assert client.post("/auth/login", data={"email": "new@test.com", "password": "wrong1"}).status_code == 401
    assert client.post("/auth/login", data={"email": "new@test.com", "password": "hunter22"}).status_code == 200
    assert client.get("/auth/me").get_json()["user"]["email"] == "new@test.com"
    assert client.post("/auth/logout").status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_admin_role_cannot_be_self_registered(app, users):
    resp = app.test_client().post("/auth/register", data={
        "name": "Sneaky", "email": "sneaky@test.com", "role": "admin",
        "password": TEST_PASSWORD, "password2": TEST_PASSWORD,
    })
    assert resp.status_code == 422


def test_anonymous_requests_get_401(app):
    resp = app.test_client().get("/tasks/")
    assert resp.status_code == 401
    assert resp.get_json()["error"]["type"] == "unauthorized"


def test_roles_listing(app, users):
    codes = {r["code"] for r in app.test_client().get("/auth/roles").get_json()["roles"]}
    assert codes == {"customer", "executor", "admin"}


def test_proposal_to_completion_over_http(customer, executor):
    task_id = create_task(customer)
    body = assign(customer, executor, task_id)
    assert body["task"]["status"] == "in-progress"
    assert body["task"]["cost"] == 100

    assert executor.post(f"/tasks/{task_id}/complete").get_json()["task"]["status"] == "awaiting-review"
    assert customer.post(f"/tasks/{task_id}/accept").status_code == 200
    resp = executor.post(f"/tasks/{task_id}/confirm-payment")
    assert resp.get_json()["task"]["status"] == "completed"

    history = customer.get("/tasks/history").get_json()["tasks"]
    assert [t["id"] for t in history] == [task_id]


def test_invalid_transition_is_409_with_context(customer, executor):
    task_id = create_task(customer)
    assign(customer, executor, task_id)

    resp = executor.post(f"/tasks/{task_id}/status", data={"status": "completed"})
    assert resp.status_code == 409
    error = resp.get_json()["error"]
    assert error["type"] == "invalid_transition"
    assert error["context"] == {"current_status": "in-progress", "requested_status": "completed", "role": "executor"}


def test_unknown_status_is_422(customer, executor):
    task_id = create_task(customer)
    resp = customer.post(f"/tasks/{task_id}/status", data={"status": "finished"})
    assert resp.status_code == 422


def test_wrong_party_named_operation_is_403(customer, executor):
    task_id = create_task(customer)
    assign(customer, executor, task_id)
    resp = customer.post(f"/tasks/{task_id}/confirm-payment")
    assert resp.status_code == 403
    assert resp.get_json()["success"] is False


def test_customer_cannot_propose(customer):
    task_id = create_task(customer)
    resp = customer.post(f"/tasks/{task_id}/proposals", data={"proposed_cost": "50"})
    assert resp.status_code == 403


def test_proposal_update_returns_200(customer, executor):
    task_id = create_task(customer)
    assert executor.post(f"/tasks/{task_id}/proposals", data={"proposed_cost": "50"}).status_code == 201
    resp = executor.post(f"/tasks/{task_id}/proposals", data={"proposed_cost": "60"})
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Proposal updated successfully."
    listed = customer.get(f"/tasks/{task_id}/proposals").get_json()["proposals"]
    assert [p["proposed_cost"] for p in listed] == [60]


def test_other_customer_cannot_see_proposals(customer, executor, login):
    task_id = create_task(customer)
    executor.post(f"/tasks/{task_id}/proposals", data={"proposed_cost": "50"})
    assert login("other").get(f"/tasks/{task_id}/proposals").status_code == 403


def test_missing_task_is_404(customer):
    resp = customer.get("/tasks/999")
    assert resp.status_code == 404
    assert resp.get_json()["error"]["type"] == "not_found"


def test_comment_with_transition_and_attachment(customer, executor):
    task_id = create_task(customer)
    assign(customer, executor, task_id)

    resp = executor.post(
        f"/tasks/{task_id}/comments",
        data={
            "text": "Ready for review",
            "new_status": "awaiting-review",
            "files": (io.BytesIO(b"%PDF-1.4"), "report.pdf", "application/pdf"),
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    assert body["task"]["status"] == "awaiting-review"
    assert body["comments"][0]["attachments"][0]["kind"] == "pdf"

    listing = customer.get(f"/tasks/{task_id}/comments").get_json()
    assert [c["is_system_message"] for c in listing["comments"]] == [True, False, True]
    assert set(listing["available_transitions"]) == {
        "revision-requested-from-executor", "accepted-awaiting-payment-confirmation",
    }


def test_empty_comment_is_422(customer):
    task_id = create_task(customer)
    assert customer.post(f"/tasks/{task_id}/comments", data={"text": ""}).status_code == 422


def test_task_page(customer, executor):
    task_id = create_task(customer)
    executor.post(f"/tasks/{task_id}/proposals", data={"proposed_cost": "50"})
    body = customer.get(f"/tasks/{task_id}").get_json()
    assert body["task"]["customer_name"] == "Alice Customer"
    assert len(body["proposals"]) == 1
    assert body["categories"]


def test_admin_edit_and_delete(customer, admin):
    task_id = create_task(customer)

    assert customer.post(f"/tasks/{task_id}/edit", data={"title": "Hijacked"}).status_code == 403

    resp = admin.post(f"/tasks/{task_id}/edit", data={"status": "awaiting-estimate", "cost": "75.5"})
    assert resp.status_code == 200, resp.get_json()
    assert resp.get_json()["task"]["status"] == "awaiting-estimate"
    assert resp.get_json()["task"]["cost"] == 75.5
    assert resp.get_json()["task"]["title"] == "Landing page"

    assert customer.post(f"/tasks/{task_id}/delete").status_code == 403
    assert admin.post(f"/tasks/{task_id}/delete").status_code == 200
    assert customer.get(f"/tasks/{task_id}").status_code == 404


def test_form_data_endpoint(app, admin):
    body = admin.get("/tasks/form-data").get_json()
    assert body["success"] is True
    assert [u["name"] for u in body["customers"]] == ["Alice Customer", "Oscar Customer"]
    assert [u["name"] for u in body["executors"]] == ["Bob Executor", "Carol Executor"]
    assert body["categories"] and body["roles"]
    assert "email" not in body["customers"][0]
    assert app.test_client().get("/tasks/form-data").status_code == 401
