import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import json_log_formatter
from flask import Flask, has_request_context, jsonify, request, session
from flask_login import current_user

from .extensions import db, migrate, login_manager, csrf, babel
from .config import Config
from .models.user import User
from .commands import register_commands

# Blueprints
from .blueprints.errors import errors_bp
from .blueprints.auth import auth_bp
from .blueprints.tasks import tasks_bp
from .blueprints.proposals import proposals_bp
from .blueprints.lifecycle import lifecycle_bp
from .blueprints.comments import comments_bp


# Optional: Sentry
def _init_sentry(app):
    dsn = app.config.get("SENTRY_DSN")
    if not dsn:
        return
    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=app.config.get("SENTRY_TRACES_SAMPLE_RATE", 0.0),
        environment=os.getenv("ENV", "development"),
        release=app.config.get("APP_VERSION"),
        send_default_pii=False,
    )
    app.logger.info("Sentry initialized.")


def _init_logging(app):
    level_name = app.config.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    # Formatter: text or JSON
    if app.config.get("LOG_JSON", False):
        formatter = json_log_formatter.VerboseJSONFormatter()
    else:
        formatter = logging.Formatter("[%(asctime)s] %(levelname)s in %(name)s: %(message)s")

    handlers = []
    if app.config.get("LOG_TO_FILE", True):
        log_dir = Path(app.config.get("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        # Rotating file handler (5MB x 5)
        handlers.append(RotatingFileHandler(
            log_dir / app.config.get("LOG_FILENAME", "taskflow.log"),
            maxBytes=5_000_000, backupCount=5, encoding="utf-8",
        ))
    # Stream to stdout as well
    handlers.append(logging.StreamHandler())

    # Service modules log under "taskflow.*"; the app logger is "taskflow" too
    pkg_logger = logging.getLogger(__name__)
    pkg_logger.setLevel(level)
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        pkg_logger.addHandler(handler)

    app.logger.setLevel(level)
    app.logger.info("Logging initialized.")


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)
    app.config.from_pyfile("config.py", silent=True)

    Path(app.instance_path).mkdir(parents=True, exist_ok=True)
    Path(app.config["UPLOAD_FOLDER"]).mkdir(parents=True, exist_ok=True)

    # Logging must come before blueprints so errors during register are captured
    _init_logging(app)
    _init_sentry(app)

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)

    # Locale from session/Accept-Language
    def _select_locale():
        if not has_request_context():
            return app.config.get("BABEL_DEFAULT_LOCALE", "en")
        return (
            session.get("lang")
            or request.accept_languages.best_match(app.config.get("LANGUAGES", ["en"]))
            or "en"
        )
    babel.init_app(app, locale_selector=_select_locale)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({
            "success": False,
            "error": {"type": "unauthorized", "message": "Please log in to access this page.", "context": {}},
        }), 401

    # Blueprints
    app.register_blueprint(errors_bp)  # error handlers
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(tasks_bp, url_prefix="/tasks")
    app.register_blueprint(proposals_bp)
    app.register_blueprint(lifecycle_bp, url_prefix="/tasks")
    app.register_blueprint(comments_bp, url_prefix="/tasks")

    register_commands(app)

    @app.route("/")
    def index():
        return jsonify({
            "success": True,
            "app": "taskflow",
            "version": app.config.get("APP_VERSION"),
            "user": current_user.to_dict() if current_user.is_authenticated else None,
        })

    return app
