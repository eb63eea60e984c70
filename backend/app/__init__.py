# backend/app/__init__.py
import logging

from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def create_app(config=None) -> Flask:
    """
    Application factory.

    config may be a config class/object (e.g. TestConfig) or a mapping of
    overrides applied on top of Config. Overrides are applied before the
    extensions bind so SQLALCHEMY_DATABASE_URI takes effect.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if isinstance(config, dict):
        app.config.update(config)
    elif config is not None:
        app.config.from_object(config)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.members import members_bp
    from .routes.organization import departments_bp, leadership_bp
    from .routes.events import events_bp
    from .routes.attendance_tokens import attendance_tokens_bp
    from .routes.attendance import attendance_bp
    from .routes.cash import cash_bp
    from .routes.archives import archives_bp
    from .routes.dashboard import dashboard_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(members_bp)
    app.register_blueprint(departments_bp)
    app.register_blueprint(leadership_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(attendance_tokens_bp)
    app.register_blueprint(attendance_bp)
    app.register_blueprint(cash_bp)
    app.register_blueprint(archives_bp)
    app.register_blueprint(dashboard_bp)

    allowed_origins = set(app.config["CORS_ORIGINS"])

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
