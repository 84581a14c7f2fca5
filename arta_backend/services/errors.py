"""
Login Error Taxonomy.

Raised by ``ProfileReconciler`` and translated to ``AuthResult`` error
codes by ``AuthService``.  All three are terminal for the login call.
"""

from __future__ import annotations

from typing import Optional

from arta_backend.models.auth_models import LoginOutcome


class AuthError(Exception):
    """Base class for login failures."""

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        outcome: Optional[LoginOutcome] = None,
    ) -> None:
        self.message: str = message
        self.original_error: Optional[Exception] = original_error
        self.outcome: Optional[LoginOutcome] = outcome
        super().__init__(self.message)


class InvalidCredentials(AuthError):
    """Bad email/password combination, whatever the underlying reason."""


class AccountInactive(AuthError):
    """Credentials were valid but the profile is deactivated."""


class InternalError(AuthError):
    """Storage or provider failed unexpectedly; not a credential judgement."""
