"""
Profile Repository.

Handles all account profile access in the ``system_users`` collection.
Profiles are keyed by Firebase Auth UID once linked; legacy profiles
created by the seeding script carry an auto-generated document ID and
are reachable only by email until their first Firebase Auth login.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from arta_backend.logger import StructuredLogger
from arta_backend.models.enums import AccountStatus
from arta_backend.models.profile import AccountProfile, normalize_email
from arta_backend.repositories.base_repository import BaseRepository
from arta_backend.repositories.document_store import Document, DocumentStore

# Upper bound on documents inspected when several share one email
# (transient duplicates left behind by a half-finished migration).
_EMAIL_SCAN_LIMIT: int = 5


class ProfileRepository(BaseRepository):
    """Data access layer for ``AccountProfile`` documents.

    **No ``delete()`` method.**  Profiles are never removed; use
    :meth:`set_status` to deactivate an account.
    """

    COLLECTION = "system_users"

    def __init__(
        self,
        store: DocumentStore,
        logger: StructuredLogger,
        collection: Optional[str] = None,
    ) -> None:
        super().__init__(store, logger, collection)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, profile_id: str) -> Optional[AccountProfile]:
        """Fetch a profile by document ID (the Firebase UID once linked)."""
        doc = self.store.get(self.collection, profile_id)
        return AccountProfile.from_document(doc.id, doc.data) if doc else None

    def get_by_email(self, email: str) -> Optional[AccountProfile]:
        """Fetch the profile owning *email* (case-insensitive).

        When more than one document carries the same email, the record
        keyed by its own ``firebaseUid`` wins, then any linked record,
        then the first one returned.
        """
        docs = self.store.find_by_field(
            self.collection, "email", normalize_email(email), limit=_EMAIL_SCAN_LIMIT,
        )
        if not docs:
            return None

        if len(docs) > 1:
            self._logger.warning(
                "Found %d profiles sharing email %s; preferring the identity-keyed one.",
                len(docs),
                normalize_email(email),
                extra={"event": "DUPLICATE_PROFILE_EMAIL"},
            )

        chosen: Document = self._pick_canonical(docs)
        return AccountProfile.from_document(chosen.id, chosen.data)

    def email_exists(self, email: str) -> bool:
        return bool(
            self.store.find_by_field(self.collection, "email", normalize_email(email), limit=1)
        )

    # ------------------------------------------------------------------
    # Writes: each method is exactly one document mutation
    # ------------------------------------------------------------------

    def create(self, profile: AccountProfile) -> AccountProfile:
        """Write a new profile at ``profile.id`` (the Firebase UID)."""
        if not profile.id:
            raise ValueError("create() requires a profile id; use add_legacy() for auto ids.")
        self.store.set(self.collection, profile.id, profile.to_document())
        self._logger.info("Profile created: %s", profile.id)
        return profile

    def add_legacy(self, profile: AccountProfile) -> AccountProfile:
        """Insert a legacy profile under an auto-generated document ID."""
        new_id = self.store.add(self.collection, profile.to_document())
        self._logger.info("Legacy profile created: %s", new_id)
        return profile.model_copy(update={"id": new_id})

    def link_identity(self, profile_id: str, uid: str, at: datetime) -> None:
        """Record the Firebase UID on a previously unlinked profile.

        The login timestamp travels in the same update so that linking
        costs one write.
        """
        self.store.update(
            self.collection,
            profile_id,
            {"firebaseUid": uid, "updatedAt": at, "lastLoginAt": at},
        )
        self._logger.info("Profile %s linked to Firebase UID %s", profile_id, uid)

    def touch_last_login(self, profile_id: str, at: datetime) -> None:
        self.store.update(self.collection, profile_id, {"lastLoginAt": at})

    def upsert_provisioned(self, profile: AccountProfile, is_new: bool) -> None:
        """Merge-write an administratively provisioned profile keyed by UID.

        Only administrative fields are written; ``passwordHash`` and
        ``lastLoginAt`` on an existing document are left untouched.
        """
        data: dict[str, Any] = {
            "name": profile.name,
            "email": profile.email,
            "role": str(profile.role),
            "department": profile.department,
            "status": str(profile.status),
            "firebaseUid": profile.firebase_uid,
            "updatedAt": profile.updated_at,
        }
        if is_new:
            data["createdAt"] = profile.created_at
        self.store.set(self.collection, profile.id, data, merge=True)

    def set_status(self, profile_id: str, status: AccountStatus, at: datetime) -> bool:
        """Flip a profile's status.  Returns ``False`` if it does not exist."""
        if self.store.get(self.collection, profile_id) is None:
            self._logger.warning("Cannot set status on %s: not found.", profile_id)
            return False
        self.store.update(
            self.collection, profile_id, {"status": str(status), "updatedAt": at},
        )
        self._logger.info("Profile %s status set to %s", profile_id, status)
        return True

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _pick_canonical(docs: list[Document]) -> Document:
        for doc in docs:
            if doc.data.get("firebaseUid") == doc.id:
                return doc
        for doc in docs:
            if doc.data.get("firebaseUid"):
                return doc
        return docs[0]
