"""Feedback submission model."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class FeedbackRecord(BaseModel):
    """A stored feedback document.  ``data`` is the free-form submission."""

    id: str
    data: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
