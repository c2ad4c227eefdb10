"""
Pytest configuration and shared fixtures.
"""
from datetime import date

import pytest

from taskflow import create_app
from taskflow.commands import seed_categories, seed_roles
from taskflow.config import TestConfig
from taskflow.extensions import db
from taskflow.models.status import TaskStatus
from taskflow.models.user import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_EXECUTOR, User
from taskflow.services import proposals, store, tasks
from taskflow.services.authz import Actor


TEST_PASSWORD = "secret123"

TEST_USERS = {
    "customer": ("Alice Customer", "alice@test.com", ROLE_CUSTOMER),
    "other": ("Oscar Customer", "oscar@test.com", ROLE_CUSTOMER),
    "executor": ("Bob Executor", "bob@test.com", ROLE_EXECUTOR),
    "executor2": ("Carol Executor", "carol@test.com", ROLE_EXECUTOR),
    "admin": ("Dana Admin", "dana@test.com", ROLE_ADMIN),
}


def build_app(tmp_path, **overrides):
    attrs = {"UPLOAD_FOLDER": str(tmp_path / "uploads"), **overrides}
    app = create_app(type("Cfg", (TestConfig,), attrs))
    with app.app_context():
        db.create_all()
        seed_roles()
        seed_categories()
    return app


@pytest.fixture
def app(tmp_path):
    app = build_app(tmp_path)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def users(app):
    """Actors keyed by fixture name; the rows are committed."""
    actors = {}
    with app.app_context():
        for key, (name, email, role) in TEST_USERS.items():
            user = User(name=name, email=email, role_id=store.get_role_by_code(role).id)
            user.set_password(TEST_PASSWORD)
            store.add_user(user)
            store.commit()
            actors[key] = Actor.from_user(user)
    return actors


@pytest.fixture
def ctx(app, users):
    """Push an app context for tests that call services directly."""
    with app.app_context():
        yield
        db.session.remove()


@pytest.fixture
def make_task(ctx, users):
    def _make(customer="customer", title="Landing page", description="Build a landing page for the product."):
        return tasks.create_task(users[customer], title, description).task.id
    return _make


@pytest.fixture
def propose(ctx, users):
    def _propose(task_id, executor="executor", cost=100, due=date(2025, 1, 1)):
        result = proposals.submit_or_update_proposal(
            task_id, users[executor], proposed_cost=cost, proposed_due_date=due
        )
        return result.data["proposal"]["id"]
    return _propose


@pytest.fixture
def assigned_task(make_task, propose, users):
    """A task in progress with ``executor`` assigned."""
    task_id = make_task()
    proposals.accept_proposal(propose(task_id), users["customer"])
    return task_id


@pytest.fixture
def force_status(ctx):
    """Put a task in a given status without going through the engine."""
    def _force(task_id, status):
        task = store.get_task_by_id(task_id)
        task.status = TaskStatus(status)
        store.commit()
    return _force


def system_comments(task_id):
    return [c for c in store.list_comments_by_task(task_id) if c.is_system_message]


def status_of(task_id) -> TaskStatus:
    db.session.expire_all()
    return store.get_task_by_id(task_id).status


# -------- HTTP helpers --------

@pytest.fixture
def login(app, users):
    """Return a test client logged in as the named fixture user."""
    def _login(key):
        client = app.test_client()
        resp = client.post("/auth/login", data={"email": TEST_USERS[key][1], "password": TEST_PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        return client
    return _login
