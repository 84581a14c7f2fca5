"""
Firebase Connection Layer.

Initialises the Firebase Admin SDK once per process and exposes the
Cloud Firestore client and the ``DocumentStore`` built on it.  This
module only manages the *connection*; it contains no query logic.

Credential sources are tried in order, the first usable one wins:

1. ``FIREBASE_SERVICE_ACCOUNT_JSON``: the whole key as a JSON string
   (serverless deployments).
2. ``FIREBASE_PROJECT_ID`` + ``FIREBASE_CLIENT_EMAIL`` +
   ``FIREBASE_PRIVATE_KEY``: individual fields; escaped ``\\n`` in the
   private key are restored.
3. The service-account file at ``SERVICE_ACCOUNT_PATH`` (local dev).
4. Application Default Credentials.

Usage (dependency injection at startup)::

    from arta_backend.database import FirebaseManager

    firebase = FirebaseManager(config=get_config(), logger=get_logger("database"))
    store = firebase.document_store
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1 import Client as FirestoreClient

from arta_backend.config import AppConfig
from arta_backend.logger import StructuredLogger
from arta_backend.repositories.document_store import FirestoreDocumentStore

_GOOGLE_TOKEN_URI: str = "https://oauth2.googleapis.com/token"


class FirebaseManager:
    """Owns the Firebase Admin app and the Firestore client.

    Parameters
    ----------
    config:
        Application configuration carrying the credential sources.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    """

    def __init__(self, config: AppConfig, logger: StructuredLogger) -> None:
        self._config: AppConfig = config
        self._logger: StructuredLogger = logger
        self._app: firebase_admin.App = self._initialize_app()
        self._firestore: Optional[FirestoreClient] = None
        self._document_store: Optional[FirestoreDocumentStore] = None

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def app(self) -> firebase_admin.App:
        """The initialised Firebase Admin app."""
        return self._app

    @property
    def firestore(self) -> FirestoreClient:
        """Lazily created Cloud Firestore client bound to :attr:`app`."""
        if self._firestore is None:
            self._firestore = firestore.client(app=self._app)
        return self._firestore

    @property
    def document_store(self) -> FirestoreDocumentStore:
        if self._document_store is None:
            self._document_store = FirestoreDocumentStore(self.firestore)
        return self._document_store

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _initialize_app(self) -> firebase_admin.App:
        """Return the default app, creating it from the first usable credential."""
        try:
            return firebase_admin.get_app()
        except ValueError:
            pass  # not initialised yet

        cfg = self._config

        service_account_json = cfg.FIREBASE_SERVICE_ACCOUNT_JSON.get_secret_value()
        if service_account_json:
            try:
                cred = credentials.Certificate(json.loads(service_account_json))
                app = firebase_admin.initialize_app(cred)
                self._logger.info(
                    "Initialized Firebase Admin using FIREBASE_SERVICE_ACCOUNT_JSON env var",
                )
                return app
            except ValueError as exc:
                self._logger.error("Failed to parse FIREBASE_SERVICE_ACCOUNT_JSON: %s", exc)

        private_key = cfg.FIREBASE_PRIVATE_KEY.get_secret_value()
        if cfg.FIREBASE_PROJECT_ID and cfg.FIREBASE_CLIENT_EMAIL and private_key:
            try:
                cred = credentials.Certificate({
                    "type": "service_account",
                    "project_id": cfg.FIREBASE_PROJECT_ID,
                    "client_email": cfg.FIREBASE_CLIENT_EMAIL,
                    "private_key": private_key.replace("\\n", "\n"),
                    "token_uri": _GOOGLE_TOKEN_URI,
                })
                app = firebase_admin.initialize_app(cred)
                self._logger.info("Initialized Firebase Admin using individual env vars")
                return app
            except ValueError as exc:
                self._logger.error("Failed to init with individual env vars: %s", exc)

        key_path = Path(cfg.SERVICE_ACCOUNT_PATH).resolve()
        if key_path.is_file():
            app = firebase_admin.initialize_app(credentials.Certificate(str(key_path)))
            self._logger.info(
                "Initialized Firebase Admin using service account at: %s", key_path,
            )
            return app

        try:
            app = firebase_admin.initialize_app()
        except Exception:
            self._logger.error(
                "Failed to initialize Firebase Admin. Set FIREBASE_SERVICE_ACCOUNT_JSON "
                "or provide a service account key file.",
                exc_info=True,
            )
            raise
        self._logger.info("Initialized Firebase Admin using Application Default Credentials")
        return app
