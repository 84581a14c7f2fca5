"""
Structured Audit Logging Utility.

Every state change (profile link, synthesis, provisioning, deactivation,
login) is logged as a structured JSON object.  Provides a
Pydantic-validated model and a single function for consistent audit
trail entries, optionally persisted to the ``audit_logs`` collection
with an ``expiresAt`` field for Firestore TTL.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from pydantic import BaseModel, Field

from arta_backend.logger import StructuredLogger
from arta_backend.repositories.document_store import DocumentStore

__all__ = ["AuditEvent", "log_audit_event", "persist_audit_event"]

AUDIT_LOGS_COLLECTION: str = "audit_logs"
DEFAULT_RETENTION_DAYS: int = 7

# Scalar type permitted inside the ``details`` mapping.  Kept flat;
# nested structures should be modelled explicitly.
DetailValue = Union[str, int, float, bool, None]


class AuditEvent(BaseModel):
    """Schema-validated representation of a single audit trail entry."""

    timestamp: datetime
    action: str
    entity_type: str
    entity_id: str
    user_id: str
    details: dict[str, DetailValue] = Field(default_factory=dict)
    expires_at: datetime

    def to_document(self) -> dict[str, object]:
        return {
            "timestamp": self.timestamp,
            "action": self.action,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "userId": self.user_id,
            "details": dict(self.details),
            "expiresAt": self.expires_at,
        }


def _build_event(
    action: str,
    entity_type: str,
    entity_id: str,
    user_id: str,
    details: Optional[dict[str, DetailValue]],
    retention_days: int,
) -> AuditEvent:
    now = datetime.now(timezone.utc)
    return AuditEvent(
        timestamp=now,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        user_id=user_id,
        details=details or {},
        expires_at=now + timedelta(days=retention_days),
    )


def log_audit_event(
    logger: StructuredLogger,
    action: str,
    entity_type: str,
    entity_id: str,
    user_id: str,
    details: Optional[dict[str, DetailValue]] = None,
    store: Optional[DocumentStore] = None,
    collection: str = AUDIT_LOGS_COLLECTION,
    retention_days: int = DEFAULT_RETENTION_DAYS,
) -> None:
    """Log a structured JSON audit event, with optional Firestore persistence.

    Always emits a structured JSON log line via *logger*.  When *store* is
    provided, also adds the event to *collection* (dual logging).

    Args:
        logger: The logger instance to write to.
        action: What happened (e.g. ``"LOGIN"``, ``"LINK_IDENTITY"``,
            ``"PROVISION"``, ``"DEACTIVATE"``).
        entity_type: Type of entity affected (e.g. ``"AccountProfile"``).
        entity_id: Document ID of the affected entity.
        user_id: ID of the user who performed the action.
        details: Optional additional context (flat scalars only).
        store: Optional document store.  When provided, the event is also
            persisted via :func:`persist_audit_event`.
        collection: Audit collection name.
        retention_days: Days until Firestore TTL removes the entry.
    """
    event = _build_event(action, entity_type, entity_id, user_id, details, retention_days)
    logger.info("AUDIT: %s", json.dumps(event.model_dump(exclude={"expires_at"}), default=str))

    # Persistence errors are logged, never propagated to the caller.
    if store is not None:
        try:
            persist_audit_event(store, event, collection)
        except Exception as store_err:
            logger.warning("Failed to persist audit event: %s", store_err)


def persist_audit_event(
    store: DocumentStore,
    event: AuditEvent,
    collection: str = AUDIT_LOGS_COLLECTION,
) -> str:
    """Write a validated audit event to the audit collection.

    Returns the new document ID.
    """
    return store.add(collection, event.to_document())
