"""
Shared Enumerations for ARTA Backend Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so existing code like ``if role == 'Viewer'`` continues to work.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Optional


class UserRole(StrEnum):
    """Valid roles stored on a ``system_users`` profile.

    ``VIEWER`` is the lowest privilege and the default for any profile
    synthesized from a provider login without elevated claims.
    """

    ADMINISTRATOR = "Administrator"
    EDITOR = "Editor"
    ANALYST = "Analyst"
    VIEWER = "Viewer"

    @classmethod
    def from_claims(cls, claims: Optional[Mapping[str, object]]) -> "UserRole":
        """Map Firebase Auth custom claims to a profile role.

        Claims are written by the provisioning script as
        ``{"role": "administrator", "isAdmin": true}``.  Unknown or
        missing claims resolve to ``VIEWER``.
        """
        claims = claims or {}
        if claims.get("isAdmin") is True:
            return cls.ADMINISTRATOR

        raw_role = claims.get("role")
        if isinstance(raw_role, str):
            wanted = raw_role.strip().lower()
            for role in cls:
                if role.value.lower() == wanted:
                    return role

        return cls.VIEWER

    @classmethod
    def canonical(cls, value: object) -> str:
        """Normalise a stored role string.

        Known roles are matched case-insensitively and returned with their
        canonical spelling.  Other configured roles are kept as stored;
        an empty value is ``VIEWER``.
        """
        raw = str(value or "").strip()
        if not raw:
            return cls.VIEWER.value
        for role in cls:
            if role.value.lower() == raw.lower():
                return role.value
        return raw


class AccountStatus(StrEnum):
    """Profile status.  Deactivation is a status flip, never a delete."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ProfileKind(StrEnum):
    """Which credential material a profile carries.

    ``MIGRATED`` profiles were seeded with a local hash and later linked to
    a Firebase Auth identity; the hash is retained but no longer used.
    ``DETACHED`` profiles carry neither and can never log in.
    """

    LEGACY = "LEGACY"
    LINKED = "LINKED"
    MIGRATED = "MIGRATED"
    DETACHED = "DETACHED"
