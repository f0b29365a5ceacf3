"""Encore application factory and bootstrap."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask

from encore.config import config_by_name
from encore.extensions import init_extensions

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Encore Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()

    app = Flask(__name__, instance_path=str(PROJECT_ROOT / "instance"))
    app.config.from_object(config_by_name.get(env_name, config_by_name["development"]))
    _prepare_database_config(app)
    _configure_logging(app)

    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    @app.get("/api/v1/ping")
    def ping():
        """Lightweight endpoint for load-balancer health checks."""
        return {"pong": True}, 200

    from encore.scripts.forecast_cli import register_commands

    register_commands(app)

    app.logger.debug("Encore app created (env=%s)", env_name)
    return app


def _prepare_database_config(app: Flask) -> None:
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""

    if db_uri.startswith("sqlite:///"):
        # Relative sqlite paths resolve against the project root, not the cwd.
        db_path = Path(db_uri.replace("sqlite:///", "", 1))
        if not db_path.is_absolute():
            db_path = PROJECT_ROOT / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"
        return

    if not db_uri.startswith("sqlite:"):
        # The class-level engine options were derived from the default URI; drop
        # sqlite-only connect_args when DATABASE_URL points somewhere else.
        engine_opts = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
        connect_args = dict(engine_opts.get("connect_args") or {})
        timeout = connect_args.pop("timeout", None)
        if timeout is not None and db_uri.startswith("postgresql"):
            connect_args.setdefault("connect_timeout", timeout)
        if connect_args:
            engine_opts["connect_args"] = connect_args
        else:
            engine_opts.pop("connect_args", None)
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_opts


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO)
    logging.getLogger("encore").setLevel(level)
    app.logger.setLevel(level)


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from encore.domains.finance.controllers.forecast_api import forecast_api_bp

    app.register_blueprint(forecast_api_bp, url_prefix="/api/finance")


def _register_error_handlers(app: Flask) -> None:
    """JSON error responses."""
    from werkzeug.exceptions import HTTPException

    from encore.core.auth.errors import AuthorizationError

    @app.errorhandler(AuthorizationError)
    def _authorization_error(exc: AuthorizationError):
        return {"ok": False, "error": exc.error}, exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500
