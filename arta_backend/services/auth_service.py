"""
Authentication Service.

Boundary between the HTTP layer and the profile reconciler.  Turns the
reconciler's exceptions into a typed ``AuthResult`` so that routes never
inspect raw exceptions, and logs every outcome with its fine-grained
``LoginOutcome``.

``InvalidCredentials`` and ``AccountInactive`` are kept distinct in the
result and in the logs; the HTTP layer decides how much to disclose.
"""

from __future__ import annotations

import re
from typing import Optional

from arta_backend.logger import StructuredLogger
from arta_backend.models.auth_models import AuthErrorCode, AuthResult
from arta_backend.models.profile import ProfileView, normalize_email
from arta_backend.repositories.document_store import DocumentStore
from arta_backend.services.errors import AccountInactive, InternalError, InvalidCredentials
from arta_backend.services.profile_reconciler import ProfileReconciler
from arta_backend.utils.audit import log_audit_event


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_EMAIL_RE: re.Pattern[str] = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

_GENERIC_INTERNAL_MESSAGE: str = "Login is temporarily unavailable. Please try again."


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class AuthService:
    """Login orchestration.

    Parameters
    ----------
    reconciler:
        Resolves credentials to a stored profile.
    logger:
        Structured JSON logger for audit-grade logging.
    audit_store:
        When given, ``LOGIN`` audit events are persisted to Firestore.
    audit_collection:
        Name of the audit collection.
    audit_retention_days:
        TTL horizon written as ``expiresAt`` on persisted audit events.
    """

    def __init__(
        self,
        reconciler: ProfileReconciler,
        logger: StructuredLogger,
        audit_store: Optional[DocumentStore] = None,
        audit_collection: str = "audit_logs",
        audit_retention_days: int = 7,
    ) -> None:
        self._reconciler: ProfileReconciler = reconciler
        self._logger: StructuredLogger = logger
        self._audit_store: Optional[DocumentStore] = audit_store
        self._audit_collection: str = audit_collection
        self._audit_retention_days: int = audit_retention_days

    # ==================================================================
    # Validation helpers
    # ==================================================================

    @staticmethod
    def validate_email(email: str) -> bool:
        """Return ``True`` when *email* matches a simplified RFC 5322 regex."""
        if not email or not email.strip():
            return False
        return bool(_EMAIL_RE.match(email.strip()))

    @staticmethod
    def normalize_email(email: str) -> str:
        """Normalise an email address: strip whitespace and lowercase."""
        return normalize_email(email)

    # ==================================================================
    # Login
    # ==================================================================

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate a user against Firebase Auth, falling back to the
        legacy password hash when Firebase Auth cannot give an answer.

        Parameters
        ----------
        email:
            The raw email entered by the user.
        password:
            The raw password entered by the user.

        Returns
        -------
        AuthResult
            ``success=True`` with a sanitised ``ProfileView``, or a
            structured error with ``error_code`` and ``error_message``.
        """
        email = self.normalize_email(email or "")

        # Malformed addresses never reach Firebase Auth or Firestore.
        if email and not self.validate_email(email):
            self._logger.info(
                "Login rejected: malformed email",
                extra={"event": "LOGIN_INVALID_CREDENTIALS", "outcome": "malformed-email"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.INVALID_CREDENTIALS,
                error_message="Invalid email or password.",
            )

        try:
            reconciled = self._reconciler.login(email, password)

        except InvalidCredentials as exc:
            self._logger.info(
                "Login rejected for %s", email,
                extra={"event": "LOGIN_INVALID_CREDENTIALS", "email": email, "outcome": str(exc.outcome)},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.INVALID_CREDENTIALS,
                error_message=exc.message,
            )

        except AccountInactive as exc:
            self._logger.warning(
                "Login refused for inactive account %s", email,
                extra={"event": "LOGIN_ACCOUNT_INACTIVE", "email": email, "outcome": str(exc.outcome)},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.ACCOUNT_INACTIVE,
                error_message=exc.message,
            )

        except InternalError as exc:
            self._logger.error(
                "Login failed for %s: %s", email, exc.message,
                extra={"event": "LOGIN_INTERNAL_ERROR", "email": email},
            )
            return self._internal_error()

        except Exception as exc:
            self._logger.error(
                "Unexpected error during login for %s: %s", email, exc,
                exc_info=True,
                extra={"event": "LOGIN_INTERNAL_ERROR", "email": email},
            )
            return self._internal_error()

        profile = reconciled.profile
        self._logger.info(
            "User authenticated: %s (role: %s)",
            profile.name,
            profile.role,
            extra={
                "event": "LOGIN",
                "email": profile.email,
                "user_id": profile.id,
                "outcome": str(reconciled.outcome),
            },
        )
        log_audit_event(
            logger=self._logger,
            action="LOGIN",
            entity_type="AccountProfile",
            entity_id=profile.id,
            user_id=profile.id,
            details={"outcome": str(reconciled.outcome)},
            store=self._audit_store,
            collection=self._audit_collection,
            retention_days=self._audit_retention_days,
        )

        return AuthResult(
            success=True,
            profile=ProfileView.from_profile(profile),
            via_legacy=reconciled.via_legacy,
        )

    @staticmethod
    def _internal_error() -> AuthResult:
        return AuthResult(
            success=False,
            error_code=AuthErrorCode.INTERNAL_ERROR,
            error_message=_GENERIC_INTERNAL_MESSAGE,
        )
