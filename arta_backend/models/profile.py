"""
Account Profile Model.

One document in the ``system_users`` collection.  Field names follow the
camelCase keys used in Firestore; Python code uses snake_case attributes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from arta_backend.models.enums import AccountStatus, ProfileKind, UserRole


def normalize_email(email: str) -> str:
    """Normalise an email address: strip whitespace and lowercase."""
    return email.strip().lower()


class AccountProfile(BaseModel):
    """Represents one system user, whichever path authenticated them.

    ``id`` is the Firestore document ID: the Firebase Auth UID for
    provisioned or synthesized profiles, an auto-generated ID for profiles
    created by the legacy seeding script.  It is not part of the stored
    document body.

    ``role`` is a plain string: the four ``UserRole`` values are stored in
    their canonical spelling, other configured roles are kept verbatim.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str = Field(default="", exclude=True)
    name: str = ""
    email: str
    role: str = UserRole.VIEWER.value
    department: str = ""
    status: AccountStatus = AccountStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    password_hash: Optional[str] = None
    firebase_uid: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("role", mode="before")
    @classmethod
    def _canonical_role(cls, value: Any) -> str:
        return UserRole.canonical(value)

    @property
    def kind(self) -> ProfileKind:
        """Tag describing which credential material this profile holds."""
        has_hash = bool(self.password_hash)
        has_uid = bool(self.firebase_uid)
        if has_hash and has_uid:
            return ProfileKind.MIGRATED
        if has_uid:
            return ProfileKind.LINKED
        if has_hash:
            return ProfileKind.LEGACY
        return ProfileKind.DETACHED

    @property
    def is_linked(self) -> bool:
        return self.kind in (ProfileKind.LINKED, ProfileKind.MIGRATED)

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "AccountProfile":
        """Build a profile from a Firestore document ID and body."""
        return cls.model_validate({**data, "id": doc_id})

    def to_document(self) -> dict[str, Any]:
        """Serialise to the Firestore document body (camelCase, no ``id``, no nulls)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ProfileView(BaseModel):
    """Sanitised projection of a profile returned to callers.

    Never includes the local password hash or any provider token.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    email: str
    role: str
    department: str
    status: AccountStatus
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    linked: bool = False

    @classmethod
    def from_profile(cls, profile: AccountProfile) -> "ProfileView":
        return cls(
            id=profile.id,
            name=profile.name,
            email=profile.email,
            role=profile.role,
            department=profile.department,
            status=profile.status,
            created_at=profile.created_at,
            last_login_at=profile.last_login_at,
            linked=profile.is_linked,
        )
