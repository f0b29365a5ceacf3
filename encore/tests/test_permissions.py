import pytest
from flask import Blueprint

pytestmark = pytest.mark.integration

from encore.core.auth.models import Role
from encore.core.utils.decorators import require_roles
from encore.extensions import db
from encore.tests.factories import auth_header, create_user


def _register(app, name, roles):
    bp = Blueprint(name, __name__)

    @bp.get(f"/{name}")
    @require_roles(roles)
    def protected():
        return {"ok": True}

    app.register_blueprint(bp)
    return f"/{name}"


def test_require_roles_blocks_without_role(app, client):
    url = _register(app, "perm_test", {"finance:write"})
    user = create_user("viewer@example.com", roles=["viewer"])
    resp = client.get(url, headers=auth_header(user.id))
    assert resp.status_code == 403


def test_require_roles_allows_with_role(app, client):
    url = _register(app, "perm_test2", {"finance:write"})
    user = create_user("writer@example.com", roles=["finance:write"])
    resp = client.get(url, headers=auth_header(user.id))
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is True


def test_admin_role_satisfies_any_requirement(app, client):
    url = _register(app, "perm_test3", {"finance:write"})
    user = create_user("root@example.com", roles=["admin"])
    assert client.get(url, headers=auth_header(user.id)).status_code == 200


def test_token_claims_do_not_grant_roles(app, client):
    from flask_jwt_extended import create_access_token

    url = _register(app, "perm_test4", {"admin"})
    user = create_user("claims@example.com")
    token = create_access_token(identity=str(user.id), additional_claims={"roles": ["admin"]})
    resp = client.get(url, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403


def test_revoked_role_takes_effect_for_existing_token(app, client):
    url = _register(app, "perm_test5", {"admin"})
    user = create_user("revoked@example.com", roles=["admin"])
    headers = auth_header(user.id)
    assert client.get(url, headers=headers).status_code == 200

    user.roles.remove(Role.query.filter_by(name="admin").one())
    db.session.commit()
    assert client.get(url, headers=headers).status_code == 403


def test_missing_token_is_unauthorized(app, client):
    url = _register(app, "perm_test6", {"admin"})
    resp = client.get(url)
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "unauthorized"
