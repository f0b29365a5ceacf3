"""The migration chain builds the same tables the models declare."""

from __future__ import annotations

from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic import command
from alembic.config import Config as AlembicConfig

pytestmark = pytest.mark.integration

ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture()
def migrated_engine(tmp_path):
    db_url = f"sqlite:///{tmp_path / 'migrations.db'}"
    cfg = AlembicConfig()
    cfg.set_main_option("script_location", str(ROOT / "encore" / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    command.upgrade(cfg, "head")
    engine = sa.create_engine(db_url)
    yield cfg, engine
    engine.dispose()


def test_upgrade_creates_forecast_tables(migrated_engine):
    _, engine = migrated_engine
    tables = set(sa.inspect(engine).get_table_names())
    assert {
        "user",
        "role",
        "user_role",
        "commerce_product",
        "commerce_order",
        "commerce_subscription",
        "finance_transaction",
        "finance_transaction_category",
        "finance_expense_forecast_setting",
        "finance_forecast_override",
    } <= tables


def test_override_cell_is_unique(migrated_engine):
    _, engine = migrated_engine
    constraints = {c["name"] for c in sa.inspect(engine).get_unique_constraints("finance_forecast_override")}
    assert "uq_finance_forecast_override_cell" in constraints


def test_downgrade_to_base_drops_everything(migrated_engine):
    cfg, engine = migrated_engine
    command.downgrade(cfg, "base")
    assert set(sa.inspect(engine).get_table_names()) <= {"alembic_version"}
