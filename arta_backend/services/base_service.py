"""
Base Service Class.

Shared constructor for services: a structured logger and an injectable
UTC clock so that timestamps written to Firestore are deterministic in
tests.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from arta_backend.logger import StructuredLogger

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BaseService:
    """Base class for all service classes. Provides a logger and a clock."""

    def __init__(self, logger: StructuredLogger, clock: Optional[Clock] = None) -> None:
        self._logger: StructuredLogger = logger
        self._clock: Clock = clock or utc_now
