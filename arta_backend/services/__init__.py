"""
Business Logic Services Package.

Services depend on the repository layer for data access and never touch
the Firestore client directly.

The ``create_services()`` factory wires every repository and service
together, returning a typed dict that the HTTP layer and the CLI scripts
consume without knowing the internal dependency graph.
"""

from __future__ import annotations

from concurrent.futures import Executor
from typing import Optional, TypedDict

import httpx

from arta_backend.config import AppConfig
from arta_backend.logger import get_logger
from arta_backend.repositories.document_store import DocumentStore
from arta_backend.repositories.feedback_repository import FeedbackRepository
from arta_backend.repositories.profile_repository import ProfileRepository
from arta_backend.services.auth_service import AuthService
from arta_backend.services.credential_verifier import CredentialVerifier
from arta_backend.services.feedback_service import FeedbackService
from arta_backend.services.identity_directory import IdentityDirectory
from arta_backend.services.last_login import LastLoginRecorder
from arta_backend.services.maintenance import MaintenanceService
from arta_backend.services.profile_reconciler import ProfileReconciler
from arta_backend.services.user_provisioning import UserProvisioningService


class ServiceContainer(TypedDict, total=False):
    """Typed container for all application services."""

    # --- Login ---
    auth_service: AuthService
    profile_reconciler: ProfileReconciler

    # --- HTTP features ---
    feedback_service: FeedbackService

    # --- Administration ---
    user_provisioning_service: UserProvisioningService
    maintenance_service: MaintenanceService


def create_services(
    store: DocumentStore,
    directory: IdentityDirectory,
    config: AppConfig,
    executor: Optional[Executor] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The HTTP
    entry point and each CLI script call it once at startup.

    Args:
        store: Document store (``FirebaseManager.document_store`` in production).
        directory: Firebase Auth directory bound to the same app.
        config: Application configuration.
        executor: Runs best-effort last-login updates off the request path;
            ``None`` runs them inline.
        transport: Optional httpx transport for the password check.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("services")

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    profile_repo = ProfileRepository(store=store, logger=logger, collection=config.USERS_COLLECTION)
    feedback_repo = FeedbackRepository(store=store, logger=logger, collection=config.FEEDBACK_COLLECTION)

    audit_kwargs = {
        "audit_store": store,
        "audit_collection": config.AUDIT_LOGS_COLLECTION,
        "audit_retention_days": config.AUDIT_LOG_RETENTION_DAYS,
    }

    # ------------------------------------------------------------------
    # 2. Leaf services
    # ------------------------------------------------------------------
    verifier = CredentialVerifier(
        api_key=config.FIREBASE_WEB_API_KEY.get_secret_value(),
        logger=logger,
        base_url=config.IDENTITY_TOOLKIT_URL,
        timeout_s=config.AUTH_TIMEOUT_S,
        reject_invalid_login_credentials=config.REJECT_INVALID_LOGIN_CREDENTIALS,
        transport=transport,
    )
    last_login = LastLoginRecorder(repo=profile_repo, logger=logger, executor=executor)
    feedback_service = FeedbackService(repo=feedback_repo, logger=logger)
    maintenance_service = MaintenanceService(
        store=store,
        logger=logger,
        audit_collection=config.AUDIT_LOGS_COLLECTION,
    )
    user_provisioning_service = UserProvisioningService(
        repo=profile_repo,
        directory=directory,
        logger=logger,
        **audit_kwargs,
    )

    # ------------------------------------------------------------------
    # 3. Login orchestration
    # ------------------------------------------------------------------
    profile_reconciler = ProfileReconciler(
        verifier=verifier,
        repo=profile_repo,
        directory=directory,
        last_login=last_login,
        logger=logger,
        **audit_kwargs,
    )
    auth_service = AuthService(reconciler=profile_reconciler, logger=logger, **audit_kwargs)

    return ServiceContainer(
        auth_service=auth_service,
        profile_reconciler=profile_reconciler,
        feedback_service=feedback_service,
        user_provisioning_service=user_provisioning_service,
        maintenance_service=maintenance_service,
    )
