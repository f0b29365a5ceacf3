"""Reusable decorators for controllers/services."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Iterable, TypeVar

from flask import current_app, jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from encore.core.auth.csrf import request_has_valid_csrf
from encore.core.auth.errors import AuthorizationError
from encore.core.auth.role_service import roles_for_identity

F = TypeVar("F", bound=Callable)


def require_roles(required_roles: Iterable[str]):
    """Enforce that the caller resolves to a user holding the given roles.

    Raises AuthorizationError (401 for a missing/invalid/unknown credential,
    403 for a missing role) before the view body runs.
    """

    def decorator(fn: F) -> F:
        @wraps(fn)
        def wrapper(*args, **kwargs):  # type: ignore[misc]
            try:
                verify_jwt_in_request()
            except (JWTExtendedException, PyJWTError) as exc:
                raise AuthorizationError("unauthorized", 401) from exc
            roles = roles_for_identity(get_jwt_identity())
            if roles is None:
                raise AuthorizationError("unauthorized", 401)
            if current_app.config.get("FORECAST_ADMIN_ROLE", "admin") in roles:
                return fn(*args, **kwargs)
            if not set(required_roles).issubset(roles):
                raise AuthorizationError("forbidden", 403)
            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def require_admin(fn: F) -> F:
    """Restrict an endpoint to holders of the configured admin role."""

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        admin_role = current_app.config.get("FORECAST_ADMIN_ROLE", "admin")
        return require_roles({admin_role})(fn)(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def csrf_protected(fn: F) -> F:
    """Reject the request with 403 unless it carries the session CSRF token."""

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        if not current_app.config.get("WTF_CSRF_ENABLED", True):
            return fn(*args, **kwargs)
        if not request_has_valid_csrf():
            return jsonify({"ok": False, "error": "csrf_failed"}), 403
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
