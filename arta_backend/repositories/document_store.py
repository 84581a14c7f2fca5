"""
Document Store Capability.

The narrow keyed-document contract every repository depends on:
get-by-ID, equality query with limit, add, set/merge, field update,
ordered paging and batched updates.  ``FirestoreDocumentStore`` binds it
to a Cloud Firestore client; tests bind it to an in-memory fake.

Repositories never touch the Firestore SDK directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

from google.cloud.firestore_v1 import Client as FirestoreClient
from google.cloud.firestore_v1 import Query
from google.cloud.firestore_v1.base_query import FieldFilter

# Firestore rejects write batches larger than this.
MAX_BATCH_WRITES: int = 500


@dataclass(frozen=True)
class Document:
    """A document ID together with its body."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


class DocumentStore(Protocol):
    """Keyed document storage used by the repository layer."""

    def get(self, collection: str, doc_id: str) -> Optional[Document]: ...

    def find_by_field(
        self, collection: str, field_name: str, value: Any, limit: int = 1,
    ) -> list[Document]: ...

    def add(self, collection: str, data: Mapping[str, Any]) -> str: ...

    def set(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        merge: bool = False,
    ) -> None: ...

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None: ...

    def list_ordered(
        self,
        collection: str,
        order_by: str,
        descending: bool = False,
        limit: int = 20,
        start_after: Optional[str] = None,
    ) -> list[Document]: ...

    def list_all(self, collection: str) -> list[Document]: ...

    def list_collections(self) -> list[str]: ...

    def batch_update(
        self, collection: str, updates: Mapping[str, Mapping[str, Any]],
    ) -> int: ...


class FirestoreDocumentStore:
    """``DocumentStore`` backed by a Cloud Firestore client.

    Parameters
    ----------
    client:
        A ``google.cloud.firestore.Client`` (as returned by
        ``firebase_admin.firestore.client()``).  The client pools its own
        connections and is safe to share across requests.
    """

    def __init__(self, client: FirestoreClient) -> None:
        self._client = client

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        snapshot = self._client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return Document(id=snapshot.id, data=snapshot.to_dict() or {})

    def find_by_field(
        self, collection: str, field_name: str, value: Any, limit: int = 1,
    ) -> list[Document]:
        query = (
            self._client.collection(collection)
            .where(filter=FieldFilter(field_name, "==", value))
            .limit(limit)
        )
        return [Document(id=snap.id, data=snap.to_dict() or {}) for snap in query.stream()]

    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        _, doc_ref = self._client.collection(collection).add(dict(data))
        return doc_ref.id

    def set(
        self,
        collection: str,
        doc_id: str,
        data: Mapping[str, Any],
        merge: bool = False,
    ) -> None:
        self._client.collection(collection).document(doc_id).set(dict(data), merge=merge)

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        self._client.collection(collection).document(doc_id).update(dict(fields))

    def list_ordered(
        self,
        collection: str,
        order_by: str,
        descending: bool = False,
        limit: int = 20,
        start_after: Optional[str] = None,
    ) -> list[Document]:
        direction = Query.DESCENDING if descending else Query.ASCENDING
        coll = self._client.collection(collection)
        query = coll.order_by(order_by, direction=direction).limit(limit)
        if start_after is not None:
            cursor = coll.document(start_after).get()
            if cursor.exists:
                query = query.start_after(cursor)
        return [Document(id=snap.id, data=snap.to_dict() or {}) for snap in query.stream()]

    def list_all(self, collection: str) -> list[Document]:
        return [
            Document(id=snap.id, data=snap.to_dict() or {})
            for snap in self._client.collection(collection).stream()
        ]

    def list_collections(self) -> list[str]:
        return [coll.id for coll in self._client.collections()]

    def batch_update(
        self, collection: str, updates: Mapping[str, Mapping[str, Any]],
    ) -> int:
        """Apply per-document field updates in write batches.

        Returns the number of documents updated.
        """
        coll = self._client.collection(collection)
        items = list(updates.items())
        for start in range(0, len(items), MAX_BATCH_WRITES):
            batch = self._client.batch()
            for doc_id, fields in items[start:start + MAX_BATCH_WRITES]:
                batch.update(coll.document(doc_id), dict(fields))
            batch.commit()
        return len(items)
