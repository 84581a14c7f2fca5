"""
User Provisioning Service.

Administrative account management for ``system_users``:

* ``provision``: create or update a Firebase Auth account, stamp its
  role claims, and merge-write the matching profile keyed by UID.  The
  profile is LINKED from the start and never needs the legacy path.
* ``seed_legacy``: create a profile that carries only a local SHA-256
  password hash (auto document ID).  It is linked on its owner's first
  successful Firebase Auth login.
* ``deactivate``: flip a profile to ``Inactive``.  Profiles are never
  deleted.

Account definitions usually come from ``<ROLE>_EMAIL`` /
``<ROLE>_PASSWORD`` / ``<ROLE>_NAME`` / ``<ROLE>_DEPARTMENT`` environment
variables; see :func:`users_from_env`.
"""

from __future__ import annotations

import os
from typing import Iterable, Mapping, Optional

from arta_backend.logger import StructuredLogger
from arta_backend.models.enums import AccountStatus, UserRole
from arta_backend.models.profile import AccountProfile
from arta_backend.models.service_models import AccountRequest, ProvisioningSummary, ServiceResult
from arta_backend.repositories.document_store import DocumentStore
from arta_backend.repositories.profile_repository import ProfileRepository
from arta_backend.services.base_service import BaseService, Clock
from arta_backend.services.identity_directory import IdentityDirectory, UserNotFoundError
from arta_backend.utils.audit import log_audit_event
from arta_backend.utils.passwords import hash_legacy_password

# Environment prefix → (role, default display name, default department).
ROLE_PREFIXES: dict[str, tuple[UserRole, str, str]] = {
    "ADMIN": (UserRole.ADMINISTRATOR, "Admin User", "IT Administration"),
    "EDITOR": (UserRole.EDITOR, "Editor User", "Business Licensing"),
    "ANALYST": (UserRole.ANALYST, "Analyst User", "Data Analytics"),
    "VIEWER": (UserRole.VIEWER, "Viewer User", "Building Permits"),
}


def users_from_env(
    prefixes: Iterable[str],
    environ: Optional[Mapping[str, str]] = None,
) -> list[AccountRequest]:
    """Build account requests from ``<PREFIX>_*`` environment variables.

    A prefix is skipped unless both ``<PREFIX>_EMAIL`` and
    ``<PREFIX>_PASSWORD`` are set.  Unknown prefixes raise ``KeyError``.
    """
    env = os.environ if environ is None else environ
    requests: list[AccountRequest] = []
    for prefix in prefixes:
        role, default_name, default_department = ROLE_PREFIXES[prefix]
        email = env.get(f"{prefix}_EMAIL", "")
        password = env.get(f"{prefix}_PASSWORD", "")
        if not email or not password:
            continue
        requests.append(
            AccountRequest(
                name=env.get(f"{prefix}_NAME") or default_name,
                email=email,
                password=password,
                role=role,
                department=env.get(f"{prefix}_DEPARTMENT") or default_department,
            )
        )
    return requests


class UserProvisioningService(BaseService):
    """Service layer for administrative account operations."""

    def __init__(
        self,
        repo: ProfileRepository,
        directory: IdentityDirectory,
        logger: StructuredLogger,
        clock: Optional[Clock] = None,
        audit_store: Optional[DocumentStore] = None,
        audit_collection: str = "audit_logs",
        audit_retention_days: int = 7,
    ) -> None:
        super().__init__(logger, clock)
        self._repo = repo
        self._directory = directory
        self._audit_store = audit_store
        self._audit_collection = audit_collection
        self._audit_retention_days = audit_retention_days

    # ------------------------------------------------------------------
    # Firebase Auth accounts
    # ------------------------------------------------------------------

    def provision(self, request: AccountRequest, actor: str = "system") -> AccountProfile:
        """Create or update the Firebase Auth account for *request*.

        Returns the profile as written.  SDK and storage errors propagate.
        """
        is_new = False
        try:
            existing = self._directory.get_user_by_email(request.email)
            user = self._directory.update_user(
                existing.uid, password=request.password, display_name=request.name,
            )
        except UserNotFoundError:
            user = self._directory.create_user(
                email=request.email,
                password=request.password,
                display_name=request.name,
                email_verified=True,
            )
            is_new = True

        self._directory.set_custom_claims(
            user.uid,
            {
                "role": request.role.value.lower(),
                "isAdmin": request.role == UserRole.ADMINISTRATOR,
            },
        )

        now = self._clock()
        profile = AccountProfile(
            id=user.uid,
            name=request.name,
            email=request.email,
            role=request.role,
            department=request.department,
            status=AccountStatus.ACTIVE,
            created_at=now if is_new else None,
            updated_at=now,
            firebase_uid=user.uid,
        )
        self._repo.upsert_provisioned(profile, is_new=is_new)

        log_audit_event(
            logger=self._logger,
            action="PROVISION",
            entity_type="AccountProfile",
            entity_id=user.uid,
            user_id=actor,
            details={"role": str(request.role), "created": is_new},
            store=self._audit_store,
            collection=self._audit_collection,
            retention_days=self._audit_retention_days,
        )
        return profile

    def provision_all(self, requests: Iterable[AccountRequest]) -> ProvisioningSummary:
        """Provision each request; one failure does not stop the batch."""
        summary = ProvisioningSummary()
        for request in requests:
            try:
                profile = self.provision(request)
            except Exception as exc:
                self._logger.error("Provisioning %s failed: %s", request.email, exc)
                summary.errors[request.email] = str(exc)
                continue
            target = summary.created if profile.created_at is not None else summary.updated
            target.append(request.email)
        return summary

    # ------------------------------------------------------------------
    # Legacy profiles
    # ------------------------------------------------------------------

    def seed_legacy(self, request: AccountRequest) -> Optional[AccountProfile]:
        """Create a hash-only profile unless the email is already taken.

        Returns ``None`` when skipped.
        """
        if self._repo.email_exists(request.email):
            self._logger.warning("User already exists: %s (skipping)", request.email)
            return None

        profile = AccountProfile(
            name=request.name,
            email=request.email,
            password_hash=hash_legacy_password(request.password),
            role=request.role,
            department=request.department,
            status=AccountStatus.ACTIVE,
            created_at=self._clock(),
        )
        created = self._repo.add_legacy(profile)
        self._logger.info("Created legacy user %s (%s)", request.email, request.role)
        return created

    def seed_all(self, requests: Iterable[AccountRequest]) -> ProvisioningSummary:
        summary = ProvisioningSummary()
        for request in requests:
            try:
                created = self.seed_legacy(request)
            except Exception as exc:
                self._logger.error("Seeding %s failed: %s", request.email, exc)
                summary.errors[request.email] = str(exc)
                continue
            (summary.created if created else summary.skipped).append(request.email)
        return summary

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def deactivate(self, profile_id: str, actor: str = "system") -> ServiceResult:
        try:
            found = self._repo.set_status(profile_id, AccountStatus.INACTIVE, self._clock())
        except Exception as exc:
            self._logger.error("Failed to deactivate %s: %s", profile_id, exc)
            return ServiceResult(
                success=False, error=f"Database error deactivating user: {exc}", status_code=500,
            )
        if not found:
            return ServiceResult(success=False, error="User not found.", status_code=404)

        log_audit_event(
            logger=self._logger,
            action="DEACTIVATE",
            entity_type="AccountProfile",
            entity_id=profile_id,
            user_id=actor,
            store=self._audit_store,
            collection=self._audit_collection,
            retention_days=self._audit_retention_days,
        )
        return ServiceResult(success=True, data={"id": profile_id, "status": str(AccountStatus.INACTIVE)})
