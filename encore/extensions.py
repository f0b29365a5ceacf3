"""Shared extensions for the Encore application."""

from pathlib import Path

from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# Services hand ORM rows back to controllers after commit.
db = SQLAlchemy(session_options={"expire_on_commit": False})
migrate = Migrate(directory=str(MIGRATIONS_DIR))
jwt = JWTManager()
# Default limits, storage and the enabled flag come from RATELIMIT_* config.
limiter = Limiter(key_func=get_remote_address)


def init_extensions(app) -> None:
    """Bind the shared extensions to ``app``."""
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
