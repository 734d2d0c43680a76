# backend/foodtrack/__init__.py
from __future__ import annotations

from typing import Any, Mapping

from flask import Flask, request

from .config import Config, ConfigError, build_engine_options
from .errors import register_error_handlers
from .extensions import db, migrate
from .logging_config import configure_logging


def create_app(overrides: Mapping[str, Any] | None = None) -> Flask:
    """
    Application factory.

    `overrides` is applied on top of the environment-derived Config before any
    extension is initialised, so tests can inject their own database URI and
    signing secret.

    Raises ConfigError when JWT_SECRET is missing: there is no default secret.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    if not app.config.get("JWT_SECRET"):
        raise ConfigError("JWT_SECRET must be set; refusing to sign tokens with a default secret")

    app.config.setdefault("SQLALCHEMY_ENGINE_OPTIONS", build_engine_options(app.config))

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.orgs import orgs_bp
    from .routes.resources import RESOURCE_BLUEPRINTS

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(orgs_bp)
    for bp in RESOURCE_BLUEPRINTS:
        app.register_blueprint(bp)

    register_error_handlers(app)

    allowed_origins = set(app.config.get("CORS_ORIGINS") or [])

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and ("*" in allowed_origins or origin in allowed_origins):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
