"""
Base Repository.

Provides shared infrastructure for all repositories:
- DocumentStore reference (Firestore in production)
- Logger reference
- The collection each repository owns
"""

from __future__ import annotations

from arta_backend.logger import StructuredLogger
from arta_backend.repositories.document_store import DocumentStore


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    COLLECTION: str = ""

    def __init__(
        self,
        store: DocumentStore,
        logger: StructuredLogger,
        collection: str | None = None,
    ) -> None:
        self._store = store
        self._logger = logger
        self._collection: str = collection or self.COLLECTION

    @property
    def store(self) -> DocumentStore:
        """Returns the document store for direct access by subclasses."""
        return self._store

    @property
    def collection(self) -> str:
        """Name of the collection this repository reads and writes."""
        return self._collection
