"""
Repository Layer Package.

Provides data-access abstractions over the document store (Firestore).
All storage operations flow through repositories: services never touch
the Firestore client directly.

Usage:
    from arta_backend.repositories.profile_repository import ProfileRepository
"""

from arta_backend.repositories.base_repository import BaseRepository
from arta_backend.repositories.document_store import (
    Document,
    DocumentStore,
    FirestoreDocumentStore,
)
from arta_backend.repositories.feedback_repository import FeedbackRepository
from arta_backend.repositories.profile_repository import ProfileRepository

__all__ = [
    "BaseRepository",
    "Document",
    "DocumentStore",
    "FeedbackRepository",
    "FirestoreDocumentStore",
    "ProfileRepository",
]
