"""
Identity Directory.

Thin wrapper around ``firebase_admin.auth`` bound to one Firebase app.
The reconciler uses ``get_user`` to read display name and custom claims
when synthesizing a profile; the provisioning service uses the write
methods to create or update Firebase Auth accounts.

SDK exceptions (``firebase_admin.exceptions.FirebaseError`` and
subclasses such as ``auth.UserNotFoundError``) propagate unchanged.
"""

from __future__ import annotations

from typing import Any, Optional

import firebase_admin
from firebase_admin import auth

from arta_backend.logger import StructuredLogger
from arta_backend.models.auth_models import ProviderUser

# Re-exported so callers can catch it without importing the SDK.
UserNotFoundError = auth.UserNotFoundError


class IdentityDirectory:
    """Read and administer Firebase Auth user records."""

    def __init__(self, app: Optional[firebase_admin.App], logger: StructuredLogger) -> None:
        self._app = app
        self._logger = logger

    def get_user(self, uid: str) -> ProviderUser:
        return self._to_provider_user(auth.get_user(uid, app=self._app))

    def get_user_by_email(self, email: str) -> ProviderUser:
        """Raises ``UserNotFoundError`` when no account has *email*."""
        return self._to_provider_user(auth.get_user_by_email(email, app=self._app))

    def create_user(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
        email_verified: bool = True,
    ) -> ProviderUser:
        record = auth.create_user(
            email=email,
            password=password,
            display_name=display_name,
            email_verified=email_verified,
            app=self._app,
        )
        self._logger.info("Firebase Auth user created: %s", record.uid)
        return self._to_provider_user(record)

    def update_user(
        self,
        uid: str,
        password: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> ProviderUser:
        kwargs: dict[str, Any] = {}
        if password is not None:
            kwargs["password"] = password
        if display_name is not None:
            kwargs["display_name"] = display_name
        record = auth.update_user(uid, app=self._app, **kwargs)
        self._logger.info("Firebase Auth user updated: %s", uid)
        return self._to_provider_user(record)

    def set_custom_claims(self, uid: str, claims: dict[str, Any]) -> None:
        auth.set_custom_user_claims(uid, claims, app=self._app)

    @staticmethod
    def _to_provider_user(record: Any) -> ProviderUser:
        return ProviderUser(
            uid=record.uid,
            email=record.email,
            display_name=record.display_name,
            custom_claims=dict(record.custom_claims or {}),
        )
