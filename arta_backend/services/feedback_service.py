"""
Feedback Service.

Create, fetch and list survey feedback submissions.  Storage errors are
logged and returned as ``ServiceResult`` failures with a fixed message;
the HTTP layer maps ``status_code`` straight onto the response.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from arta_backend.logger import StructuredLogger
from arta_backend.models.feedback import FeedbackRecord
from arta_backend.models.service_models import ServiceResult
from arta_backend.repositories.feedback_repository import FeedbackRepository
from arta_backend.services.base_service import BaseService

MAX_LIST_LIMIT: int = 100


class FeedbackService(BaseService):
    """Service layer for the ``feedbacks`` collection."""

    def __init__(self, repo: FeedbackRepository, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._repo = repo

    def submit(self, payload: Optional[Mapping[str, Any]]) -> ServiceResult[FeedbackRecord]:
        """Store one submission.  An empty or missing body is a 400."""
        if not payload:
            return ServiceResult(success=False, error="Empty payload", status_code=400)
        try:
            record = self._repo.add(payload)
        except Exception as exc:
            self._logger.error("Failed to save feedback: %s", exc, exc_info=True)
            return ServiceResult(success=False, error="failed to save feedback", status_code=500)
        return ServiceResult(success=True, data=record, status_code=201)

    def get(self, feedback_id: str) -> ServiceResult[FeedbackRecord]:
        try:
            record = self._repo.get(feedback_id)
        except Exception as exc:
            self._logger.error("Failed to read feedback %s: %s", feedback_id, exc, exc_info=True)
            return ServiceResult(success=False, error="failed to read feedback", status_code=500)
        if record is None:
            return ServiceResult(success=False, error="not found", status_code=404)
        return ServiceResult(success=True, data=record)

    def list_recent(self, limit: int = 20) -> ServiceResult[list[FeedbackRecord]]:
        """Most recent submissions first; *limit* is clamped to 1..100."""
        limit = max(1, min(limit, MAX_LIST_LIMIT))
        try:
            records = self._repo.list_recent(limit)
        except Exception as exc:
            self._logger.error("Failed to list feedbacks: %s", exc, exc_info=True)
            return ServiceResult(success=False, error="failed to list feedbacks", status_code=500)
        return ServiceResult(success=True, data=records)
