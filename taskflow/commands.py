# taskflow/commands.py
import click
from flask import current_app

from .extensions import db
from .models.task import TaskCategory
from .models.user import DEFAULT_ROLES, Role


def seed_roles() -> int:
    """Insert missing roles; existing display names are left alone."""
    added = 0
    for code, name in DEFAULT_ROLES:
        if not Role.query.filter_by(code=code).first():
            db.session.add(Role(code=code, name=name))
            added += 1
    db.session.commit()
    return added


def seed_categories(names=None) -> int:
    names = names if names is not None else current_app.config.get("DEFAULT_TASK_CATEGORIES", [])
    added = 0
    for name in names:
        if not TaskCategory.query.filter_by(name=name).first():
            db.session.add(TaskCategory(name=name))
            added += 1
    db.session.commit()
    return added


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create tables and seed roles and categories."""
        db.create_all()
        roles = seed_roles()
        categories = seed_categories()
        click.echo(f"Database ready ({roles} roles, {categories} categories added).")

    @app.cli.command("seed-roles")
    def seed_roles_cmd():
        click.echo(f"{seed_roles()} roles added.")
