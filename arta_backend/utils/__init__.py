"""Shared utility functions and models for the ARTA backend.

This package provides convenience re-exports so that consumers can import
directly from ``arta_backend.utils`` while full absolute imports remain
supported.
"""

from arta_backend.utils.audit import AuditEvent, log_audit_event
from arta_backend.utils.general import convert_to_json_safe
from arta_backend.utils.passwords import hash_legacy_password, verify_legacy_password

__all__ = [
    "AuditEvent",
    "convert_to_json_safe",
    "hash_legacy_password",
    "log_audit_event",
    "verify_legacy_password",
]
