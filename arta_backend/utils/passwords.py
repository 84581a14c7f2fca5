"""
Legacy Password Hashing.

Profiles seeded before Firebase Auth carry ``passwordHash``: the unsalted
hex SHA-256 digest of the password, matching what the mobile client
computes.  New credentials are never written in this format except by
the legacy seeding script.
"""

from __future__ import annotations

import hashlib
import hmac

__all__ = ["hash_legacy_password", "verify_legacy_password"]


def hash_legacy_password(password: str) -> str:
    """Return the hex SHA-256 digest of *password*."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def verify_legacy_password(password: str, stored_hash: str) -> bool:
    """Compare *password* against *stored_hash* in constant time.

    Stored digests are compared case-insensitively since some seeded
    documents were written with upper-case hex.
    """
    computed: str = hash_legacy_password(password)
    return hmac.compare_digest(computed, stored_hash.strip().lower())
