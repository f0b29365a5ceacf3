"""Alembic environment for Encore."""

from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool

sys.path.append(str(Path(__file__).resolve().parents[2]))

from encore import create_app  # noqa: E402
from encore.extensions import db  # noqa: E402

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

if config.config_file_name and Path(config.config_file_name).exists():
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = db.metadata


def _load_models() -> None:
    # Populate db.metadata for autogenerate.
    from encore.core.auth import models as _auth_models  # noqa: F401
    from encore.core.users import models as _user_models  # noqa: F401
    from encore.domains.commerce.models import order_models  # noqa: F401
    from encore.domains.finance.models import forecast_models  # noqa: F401


def get_url() -> str:
    url = config.get_main_option("sqlalchemy.url")
    if url:
        return url
    app = create_app(config.get_main_option("encore_env", "development"))
    return app.config["SQLALCHEMY_DATABASE_URI"]


def run_migrations_offline() -> None:
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = get_url()

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


_load_models()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
