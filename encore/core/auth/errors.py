"""Authorization exceptions."""

from __future__ import annotations


class AuthorizationError(Exception):
    """Raised when the caller is missing a credential or lacks a required role."""

    def __init__(self, error: str = "forbidden", status_code: int = 403):
        self.error = error
        self.status_code = status_code
        super().__init__(error)
