"""
Application Configuration.

Pydantic Settings model for the ARTA backend.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Firebase Admin credentials (first match wins, see FirebaseManager) ---
    FIREBASE_SERVICE_ACCOUNT_JSON: SecretStr = SecretStr("")
    FIREBASE_PROJECT_ID: str = ""
    FIREBASE_CLIENT_EMAIL: str = ""
    FIREBASE_PRIVATE_KEY: SecretStr = SecretStr("")
    SERVICE_ACCOUNT_PATH: str = "serviceAccountKey.json"

    # --- Identity provider (password verification) ---
    FIREBASE_WEB_API_KEY: SecretStr = SecretStr("")
    IDENTITY_TOOLKIT_URL: str = "https://identitytoolkit.googleapis.com/v1"
    AUTH_TIMEOUT_S: float = 8.0
    # Firebase returns INVALID_LOGIN_CREDENTIALS for a wrong password when
    # email-enumeration protection is on.  Set to treat it as a rejection.
    REJECT_INVALID_LOGIN_CREDENTIALS: bool = False

    # --- Firestore collections ---
    USERS_COLLECTION: str = "system_users"
    FEEDBACK_COLLECTION: str = "feedbacks"
    AUDIT_LOGS_COLLECTION: str = "audit_logs"
    AUDIT_LOG_RETENTION_DAYS: int = 7

    # --- HTTP ---
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    CORS_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])

    # --- Rate limits: (window seconds, max requests per window) ---
    GLOBAL_RATE_LIMIT: tuple[int, int] = (15 * 60, 1000)
    BURST_RATE_LIMIT: tuple[int, int] = (10, 50)
    AUTH_RATE_LIMIT: tuple[int, int] = (15 * 60, 10)
    FEEDBACK_RATE_LIMIT: tuple[int, int] = (15 * 60, 30)
    READ_RATE_LIMIT: tuple[int, int] = (15 * 60, 200)

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "arta_backend.log"
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty.

        Pydantic silently falls back to defaults when ``.env`` is missing.
        This validator logs a warning so operators know the service is
        running with placeholder values.
        """
        _log = logging.getLogger("arta_backend.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found: all configuration loaded from "
                "environment variables or defaults."
            )

        if not self.has_explicit_credentials and not Path(self.SERVICE_ACCOUNT_PATH).exists():
            _log.warning(
                "No Firebase service account configured: falling back to "
                "Application Default Credentials."
            )

        if not self.FIREBASE_WEB_API_KEY.get_secret_value():
            _log.warning(
                "FIREBASE_WEB_API_KEY is empty: password verification against "
                "Firebase Auth is disabled and every login takes the legacy path."
            )

        return self

    @property
    def has_explicit_credentials(self) -> bool:
        """``True`` when a service account is supplied through the environment."""
        if self.FIREBASE_SERVICE_ACCOUNT_JSON.get_secret_value():
            return True
        return bool(
            self.FIREBASE_PROJECT_ID
            and self.FIREBASE_CLIENT_EMAIL
            and self.FIREBASE_PRIVATE_KEY.get_secret_value()
        )

    @property
    def log_level(self) -> int:
        """Resolve ``LOG_LEVEL`` to a ``logging`` constant.

        Raises:
            ValueError: If the configured level name is unknown.
        """
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        if not isinstance(level, int):
            raise ValueError(f"Invalid log level: {self.LOG_LEVEL}")
        return level


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    On first call, creates an ``AppConfig`` instance (reading from ``.env``).
    Subsequent calls return the same instance.  Uses a check-lock-check
    pattern to avoid the lock overhead on the fast path while remaining
    thread-safe during first initialisation.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
