"""Session-bound CSRF tokens for the forecast admin endpoints.

A token is issued by ``GET /api/finance/forecast/csrf-token`` and must be sent
back in the ``X-CSRF-Token`` header on every settings or override mutation.
"""

from __future__ import annotations

import secrets

from flask import request, session

CSRF_HEADER = "X-CSRF-Token"
CSRF_SESSION_KEY = "_encore_csrf"


def issue_csrf_token() -> str:
    """Return the session's token, minting one on first use."""
    token = session.get(CSRF_SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        session[CSRF_SESSION_KEY] = token
    return token


def request_has_valid_csrf() -> bool:
    expected = session.get(CSRF_SESSION_KEY)
    supplied = request.headers.get(CSRF_HEADER, "")
    if not expected or not supplied:
        return False
    return secrets.compare_digest(supplied, expected)
