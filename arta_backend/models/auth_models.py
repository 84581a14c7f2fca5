"""
Authentication Pipeline Models.

Pydantic models and enumerations for the contracts between the
credential verifier, the profile reconciler, ``AuthService`` and the
HTTP layer.  Every auth operation returns a structured, inspectable
result rather than raw strings or exception side-channels.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from arta_backend.models.profile import AccountProfile, ProfileView


# ---------------------------------------------------------------------------
# Credential verification
# ---------------------------------------------------------------------------

class VerificationOutcome(StrEnum):
    """Three-way result of one provider password check.

    Only ``UNAVAILABLE`` permits the legacy local-hash fallback;
    ``REJECTED`` is final.
    """

    VERIFIED = "verified"
    REJECTED = "rejected"
    UNAVAILABLE = "unavailable"


# Identity Toolkit ``error.message`` codes the provider returns from
# ``accounts:signInWithPassword``.  Codes not listed here (including
# EMAIL_NOT_FOUND and INVALID_LOGIN_CREDENTIALS, which do not prove an
# existing account's password wrong) are treated as UNAVAILABLE.
# ``REJECT_INVALID_LOGIN_CREDENTIALS`` moves the latter to REJECTED.
PROVIDER_ERROR_MAP: dict[str, VerificationOutcome] = {
    "INVALID_PASSWORD": VerificationOutcome.REJECTED,
    "USER_DISABLED": VerificationOutcome.REJECTED,
    "TOO_MANY_ATTEMPTS_TRY_LATER": VerificationOutcome.REJECTED,
}


class VerificationResult(BaseModel):
    """Result of ``CredentialVerifier.verify``.

    Attributes
    ----------
    outcome:
        Which of the three outcomes the provider call produced.
    uid:
        Stable Firebase Auth UID; present only when ``VERIFIED``.
    reason:
        Provider error code or local failure description, for logs only.
    """

    outcome: VerificationOutcome
    uid: Optional[str] = None
    reason: Optional[str] = None

    @model_validator(mode="after")
    def _uid_iff_verified(self) -> "VerificationResult":
        if self.outcome == VerificationOutcome.VERIFIED and not self.uid:
            raise ValueError("A verified result must carry the provider uid.")
        if self.outcome != VerificationOutcome.VERIFIED and self.uid:
            raise ValueError("Only a verified result may carry a uid.")
        return self


class ProviderUser(BaseModel):
    """Identity attributes fetched from Firebase Auth for synthesis."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    custom_claims: dict[str, object] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Login outcome
# ---------------------------------------------------------------------------

class LoginOutcome(StrEnum):
    """Fine-grained outcome of one login attempt.  Logged, never returned."""

    EXTERNAL_SUCCESS = "external-success"
    EXTERNAL_REJECT = "external-explicit-reject"
    EXTERNAL_UNAVAILABLE = "external-unreachable-or-unknown"
    LEGACY_MATCH = "legacy-hash-match"
    LEGACY_MISMATCH = "legacy-hash-mismatch"
    NO_CREDENTIAL_MATERIAL = "no-credential-material"


class ReconciledLogin(BaseModel):
    """A successful reconciliation: the resolved profile and how it was reached."""

    profile: AccountProfile
    outcome: LoginOutcome

    @property
    def via_legacy(self) -> bool:
        return self.outcome == LoginOutcome.LEGACY_MATCH


class AuthErrorCode(StrEnum):
    """Exhaustive enumeration of login error categories surfaced to callers."""

    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_INACTIVE = "account_inactive"
    INTERNAL_ERROR = "internal_error"


# ---------------------------------------------------------------------------
# Unified auth response
# ---------------------------------------------------------------------------

class AuthResult(BaseModel):
    """Unified response for a login attempt.

    Attributes
    ----------
    success:
        ``True`` when the caller is authenticated.
    error_code:
        Structured error category (``None`` on success).
    error_message:
        Human-readable error description (``None`` on success).
    profile:
        Sanitised profile of the authenticated user.
    via_legacy:
        ``True`` when the login was verified against the locally stored
        password hash instead of Firebase Auth.
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    profile: Optional[ProfileView] = None
    via_legacy: bool = False
