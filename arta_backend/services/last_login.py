"""
Last-Login Recorder.

Updates ``lastLoginAt`` on a profile after a successful login without
holding up the login response.  The write is best-effort: a failure is
logged at WARNING with the profile ID and never reaches the caller.
"""

from __future__ import annotations

from concurrent.futures import Executor
from datetime import datetime
from typing import Optional

from arta_backend.logger import StructuredLogger
from arta_backend.repositories.profile_repository import ProfileRepository


class LastLoginRecorder:
    """Dispatch last-login timestamp updates.

    Parameters
    ----------
    repo:
        Profile repository performing the update.
    logger:
        Structured logger for failures.
    executor:
        Where to run the update.  ``None`` runs it inline, which is what
        tests and the CLI scripts use; the HTTP server passes a thread
        pool.
    """

    def __init__(
        self,
        repo: ProfileRepository,
        logger: StructuredLogger,
        executor: Optional[Executor] = None,
    ) -> None:
        self._repo = repo
        self._logger = logger
        self._executor = executor

    def record(self, profile_id: str, at: datetime) -> None:
        if self._executor is None:
            self._write(profile_id, at)
            return
        try:
            self._executor.submit(self._write, profile_id, at)
        except RuntimeError as exc:
            # Executor already shut down.
            self._logger.warning(
                "Could not schedule last-login update for %s: %s", profile_id, exc,
                extra={"event": "LAST_LOGIN_FAILED", "profile_id": profile_id},
            )

    def _write(self, profile_id: str, at: datetime) -> None:
        try:
            self._repo.touch_last_login(profile_id, at)
        except Exception as exc:
            self._logger.warning(
                "Last-login update failed for %s: %s", profile_id, exc,
                extra={"event": "LAST_LOGIN_FAILED", "profile_id": profile_id},
            )
