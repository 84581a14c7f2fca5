"""
Profile Reconciler.

Resolves a login attempt to exactly one ``AccountProfile``, whichever
credential path succeeds:

    VerifyingExternal
      ├─ VERIFIED    → by uid → by email (link) → synthesize
      ├─ REJECTED    → InvalidCredentials (legacy path skipped)
      └─ UNAVAILABLE → legacy hash check by email
                         ├─ match    → profile
                         └─ mismatch / no profile / no hash → InvalidCredentials

The status gate runs after credential success and before any write, so
an inactive account is never linked and never gets a last-login stamp.

Each call performs at most one profile write.  Linking and synthesis
carry ``lastLoginAt`` in that same write; otherwise the timestamp is
handed to ``LastLoginRecorder``, which is detached and best-effort.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from arta_backend.logger import StructuredLogger
from arta_backend.models.auth_models import (
    LoginOutcome,
    ProviderUser,
    ReconciledLogin,
    VerificationOutcome,
)
from arta_backend.models.enums import AccountStatus, ProfileKind, UserRole
from arta_backend.models.profile import AccountProfile, normalize_email
from arta_backend.repositories.document_store import DocumentStore
from arta_backend.repositories.profile_repository import ProfileRepository
from arta_backend.services.base_service import BaseService, Clock
from arta_backend.services.credential_verifier import CredentialVerifier
from arta_backend.services.errors import AccountInactive, InternalError, InvalidCredentials
from arta_backend.services.identity_directory import IdentityDirectory
from arta_backend.services.last_login import LastLoginRecorder
from arta_backend.utils.audit import log_audit_event
from arta_backend.utils.passwords import verify_legacy_password

_INVALID_MESSAGE: str = "Invalid email or password."


class ProfileReconciler(BaseService):
    """Map an external identity or a legacy hash onto a stored profile.

    Parameters
    ----------
    verifier:
        Firebase Auth password check.
    repo:
        Profile repository (``system_users``).
    directory:
        Firebase Auth user lookup, used only when synthesizing.
    last_login:
        Recorder for the best-effort ``lastLoginAt`` update.
    logger:
        Structured logger.
    clock:
        Source of "now" for stored timestamps.
    audit_store:
        When given, link and synthesis audit events are persisted.
    audit_collection, audit_retention_days:
        Where persisted audit events go and how long they are kept.
    """

    def __init__(
        self,
        verifier: CredentialVerifier,
        repo: ProfileRepository,
        directory: IdentityDirectory,
        last_login: LastLoginRecorder,
        logger: StructuredLogger,
        clock: Optional[Clock] = None,
        audit_store: Optional[DocumentStore] = None,
        audit_collection: str = "audit_logs",
        audit_retention_days: int = 7,
    ) -> None:
        super().__init__(logger, clock)
        self._verifier = verifier
        self._repo = repo
        self._directory = directory
        self._last_login = last_login
        self._audit_store = audit_store
        self._audit_collection = audit_collection
        self._audit_retention_days = audit_retention_days

    def login(self, email: str, password: str) -> ReconciledLogin:
        """Authenticate *email*/*password* and return the resolved profile.

        Raises
        ------
        InvalidCredentials
            Unknown email, provider rejection, hash mismatch, or no
            usable credential material.
        AccountInactive
            Credentials were valid but the profile is not Active.
        InternalError
            A storage call failed while resolving or writing the profile.
        """
        email = normalize_email(email or "")
        if not email or not password:
            raise InvalidCredentials(_INVALID_MESSAGE, outcome=LoginOutcome.NO_CREDENTIAL_MATERIAL)

        result = self._verifier.verify(email, password)

        if result.outcome == VerificationOutcome.VERIFIED:
            profile = self._resolve_verified(email, result.uid or "")
            return ReconciledLogin(profile=profile, outcome=LoginOutcome.EXTERNAL_SUCCESS)
        elif result.outcome == VerificationOutcome.REJECTED:
            raise InvalidCredentials(_INVALID_MESSAGE, outcome=LoginOutcome.EXTERNAL_REJECT)
        else:
            profile = self._resolve_legacy(email, password)
            return ReconciledLogin(profile=profile, outcome=LoginOutcome.LEGACY_MATCH)

    # ------------------------------------------------------------------
    # Verified path
    # ------------------------------------------------------------------

    def _resolve_verified(self, email: str, uid: str) -> AccountProfile:
        now = self._clock()

        by_uid = self._lookup(lambda: self._repo.get_by_id(uid), uid)
        if by_uid is not None:
            self._require_active(by_uid, LoginOutcome.EXTERNAL_SUCCESS)
            self._last_login.record(by_uid.id, now)
            return by_uid.model_copy(update={"last_login_at": now})

        by_email = self._lookup(lambda: self._repo.get_by_email(email), email)
        if by_email is not None:
            return self._link(by_email, uid, now)

        return self._synthesize(email, uid, now)

    def _link(self, profile: AccountProfile, uid: str, now: datetime) -> AccountProfile:
        if profile.firebase_uid and profile.firebase_uid != uid:
            self._logger.error(
                "Profile %s is linked to %s but Firebase Auth verified %s for the same email.",
                profile.id,
                profile.firebase_uid,
                uid,
                extra={"event": "IDENTITY_CONFLICT", "profile_id": profile.id},
            )
            raise InternalError("Identity conflict on profile.", outcome=LoginOutcome.EXTERNAL_SUCCESS)

        self._require_active(profile, LoginOutcome.EXTERNAL_SUCCESS)

        if profile.firebase_uid == uid:
            # Already linked under a non-uid document ID.
            self._last_login.record(profile.id, now)
            return profile.model_copy(update={"last_login_at": now})

        try:
            self._repo.link_identity(profile.id, uid, now)
        except Exception as exc:
            self._logger.error(
                "Linking profile %s to %s failed: %s", profile.id, uid, exc, exc_info=True,
            )
            raise InternalError("Could not link profile.", original_error=exc) from exc

        log_audit_event(
            logger=self._logger,
            action="LINK_IDENTITY",
            entity_type="AccountProfile",
            entity_id=profile.id,
            user_id=uid,
            details={"previous_kind": str(profile.kind)},
            store=self._audit_store,
            collection=self._audit_collection,
            retention_days=self._audit_retention_days,
        )
        return profile.model_copy(
            update={"firebase_uid": uid, "updated_at": now, "last_login_at": now},
        )

    def _synthesize(self, email: str, uid: str, now: datetime) -> AccountProfile:
        provider_user = self._fetch_provider_user(uid)
        display_name = (provider_user.display_name if provider_user else None) or email.split("@")[0]
        role = UserRole.from_claims(provider_user.custom_claims if provider_user else None)

        profile = AccountProfile(
            id=uid,
            name=display_name,
            email=email,
            role=role,
            department="",
            status=AccountStatus.ACTIVE,
            created_at=now,
            updated_at=now,
            last_login_at=now,
            firebase_uid=uid,
        )
        try:
            self._repo.create(profile)
        except Exception as exc:
            self._logger.error(
                "Synthesizing profile for %s failed: %s", uid, exc, exc_info=True,
            )
            raise InternalError("Could not create profile.", original_error=exc) from exc

        log_audit_event(
            logger=self._logger,
            action="SYNTHESIZE",
            entity_type="AccountProfile",
            entity_id=uid,
            user_id=uid,
            details={"role": str(role)},
            store=self._audit_store,
            collection=self._audit_collection,
            retention_days=self._audit_retention_days,
        )
        return profile

    def _fetch_provider_user(self, uid: str) -> Optional[ProviderUser]:
        try:
            return self._directory.get_user(uid)
        except Exception as exc:
            self._logger.warning(
                "Could not read Firebase Auth record for %s; using defaults: %s", uid, exc,
            )
            return None

    # ------------------------------------------------------------------
    # Legacy path
    # ------------------------------------------------------------------

    def _resolve_legacy(self, email: str, password: str) -> AccountProfile:
        profile = self._lookup(lambda: self._repo.get_by_email(email), email)
        if profile is None:
            raise InvalidCredentials(_INVALID_MESSAGE, outcome=LoginOutcome.EXTERNAL_UNAVAILABLE)

        # Once linked, the retained hash is no longer authoritative.
        if profile.kind != ProfileKind.LEGACY:
            raise InvalidCredentials(_INVALID_MESSAGE, outcome=LoginOutcome.NO_CREDENTIAL_MATERIAL)

        if not verify_legacy_password(password, profile.password_hash or ""):
            raise InvalidCredentials(_INVALID_MESSAGE, outcome=LoginOutcome.LEGACY_MISMATCH)

        self._require_active(profile, LoginOutcome.LEGACY_MATCH)
        now = self._clock()
        self._last_login.record(profile.id, now)
        return profile.model_copy(update={"last_login_at": now})

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lookup(
        self, fetch: Callable[[], Optional[AccountProfile]], key: str,
    ) -> Optional[AccountProfile]:
        try:
            return fetch()
        except Exception as exc:
            self._logger.error("Profile lookup failed for %s: %s", key, exc, exc_info=True)
            raise InternalError("Profile lookup failed.", original_error=exc) from exc

    @staticmethod
    def _require_active(profile: AccountProfile, outcome: LoginOutcome) -> None:
        if not profile.is_active:
            raise AccountInactive("Account is inactive.", outcome=outcome)
