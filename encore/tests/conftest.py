import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from encore import create_app
from encore.extensions import db
from encore.core.auth import models as auth_models
from encore.core.users import models as user_models
from encore.domains.commerce.models import order_models
from encore.domains.finance.models import forecast_models
from encore.tests.factories import auth_header, create_user


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")
    config.addinivalue_line("markers", "smoke: Quick smoke tests for CI")


@pytest.fixture()
def app():
    """
    Create a per-test app backed by its own in-memory database.

    The schema is built from model metadata; the migration chain is covered
    separately in test_migrations.py.
    """
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()
    db.create_all()
    try:
        yield app
    finally:
        db.session.remove()
        db.drop_all()
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def admin_user(app):
    return create_user("admin@example.com", roles=["admin"])


@pytest.fixture()
def admin_headers(admin_user):
    return auth_header(admin_user.id)


@pytest.fixture()
def member_headers(app):
    user = create_user("member@example.com", roles=["member"])
    return auth_header(user.id)
