"""
Feedback Repository.

Stores free-form survey feedback submissions in the ``feedbacks``
collection, stamped with ``createdAt``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from arta_backend.models.feedback import FeedbackRecord
from arta_backend.repositories.base_repository import BaseRepository
from arta_backend.repositories.document_store import Document


class FeedbackRepository(BaseRepository):
    """Data access layer for feedback submissions."""

    COLLECTION = "feedbacks"

    def add(self, payload: Mapping[str, Any]) -> FeedbackRecord:
        data: dict[str, Any] = {**payload, "createdAt": datetime.now(timezone.utc)}
        new_id = self.store.add(self.collection, data)
        self._logger.info("Feedback stored: %s", new_id)
        return FeedbackRecord(id=new_id, data=data, created_at=data["createdAt"])

    def get(self, feedback_id: str) -> Optional[FeedbackRecord]:
        doc = self.store.get(self.collection, feedback_id)
        return self._to_record(doc) if doc else None

    def list_recent(self, limit: int = 20) -> list[FeedbackRecord]:
        docs = self.store.list_ordered(
            self.collection, order_by="createdAt", descending=True, limit=limit,
        )
        return [self._to_record(doc) for doc in docs]

    @staticmethod
    def _to_record(doc: Document) -> FeedbackRecord:
        return FeedbackRecord(id=doc.id, data=doc.data, created_at=doc.data.get("createdAt"))
