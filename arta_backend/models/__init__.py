"""
Data Models Package.

Re-exports all Pydantic models for short imports:
    from arta_backend.models import AccountProfile, ProfileView, UserRole
    from arta_backend.models import AuthResult, VerificationResult
"""

from __future__ import annotations

from arta_backend.models.auth_models import (
    AuthErrorCode,
    AuthResult,
    LoginOutcome,
    ProviderUser,
    ReconciledLogin,
    VerificationOutcome,
    VerificationResult,
)
from arta_backend.models.enums import AccountStatus, ProfileKind, UserRole
from arta_backend.models.feedback import FeedbackRecord
from arta_backend.models.profile import AccountProfile, ProfileView, normalize_email
from arta_backend.models.service_models import (
    AccountRequest,
    ProvisioningSummary,
    ServiceResult,
)

__all__ = [
    "AccountProfile",
    "AccountRequest",
    "AccountStatus",
    "AuthErrorCode",
    "AuthResult",
    "FeedbackRecord",
    "LoginOutcome",
    "ProfileKind",
    "ProfileView",
    "ProviderUser",
    "ProvisioningSummary",
    "ReconciledLogin",
    "ServiceResult",
    "UserRole",
    "VerificationOutcome",
    "VerificationResult",
    "normalize_email",
]
