"""Role lookup for authenticated identities."""

from __future__ import annotations

from typing import Optional

from encore.core.auth.models import Role, UserRole
from encore.core.users.models import User
from encore.extensions import db


def resolve_user(identity) -> Optional[User]:
    """Return the active user behind a JWT identity, or None."""
    try:
        user_id = int(identity)
    except (TypeError, ValueError):
        return None
    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


def roles_for_identity(identity) -> Optional[set[str]]:
    """Role names held by the identity; None when it does not resolve to a user.

    Roles are queried on every call so a revoked role takes effect before the
    token expires.
    """
    user = resolve_user(identity)
    if user is None:
        return None
    rows = (
        db.session.query(Role.name)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user.id)
        .all()
    )
    return {name for (name,) in rows}
