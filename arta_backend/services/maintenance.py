"""
Maintenance Service.

Operational jobs run from the command line:

* backfilling ``expiresAt`` on audit log entries written before the
  Firestore TTL policy existed;
* exporting collections to timestamped JSON files.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from arta_backend.logger import StructuredLogger
from arta_backend.repositories.document_store import MAX_BATCH_WRITES, Document, DocumentStore
from arta_backend.services.base_service import BaseService, Clock
from arta_backend.utils.general import convert_to_json_safe


class MaintenanceService(BaseService):
    """TTL backfill and JSON export over a ``DocumentStore``."""

    def __init__(
        self,
        store: DocumentStore,
        logger: StructuredLogger,
        clock: Optional[Clock] = None,
        audit_collection: str = "audit_logs",
    ) -> None:
        super().__init__(logger, clock)
        self._store = store
        self._audit_collection = audit_collection

    # ------------------------------------------------------------------
    # Audit log TTL
    # ------------------------------------------------------------------

    def set_audit_log_ttl(self, retention_days: int, batch_size: int = MAX_BATCH_WRITES) -> int:
        """Add ``expiresAt = timestamp + retention`` where it is missing.

        Pages through the audit collection newest first.  Entries that
        already carry ``expiresAt`` are left alone; entries without a
        usable ``timestamp`` are measured from now.

        Returns the number of documents updated.
        """
        retention = timedelta(days=retention_days)
        total = 0
        last_id: Optional[str] = None

        while True:
            page = self._store.list_ordered(
                self._audit_collection,
                order_by="timestamp",
                descending=True,
                limit=batch_size,
                start_after=last_id,
            )
            if not page:
                break

            updates = {
                doc.id: {"expiresAt": self._timestamp_of(doc) + retention}
                for doc in page
                if not doc.data.get("expiresAt")
            }
            if updates:
                total += self._store.batch_update(self._audit_collection, updates)
                self._logger.info("Updated %d audit log entries (total: %d)", len(updates), total)

            last_id = page[-1].id
            if len(page) < batch_size:
                break

        self._logger.info("Audit log TTL migration complete: %d documents updated", total)
        return total

    def _timestamp_of(self, doc: Document) -> datetime:
        raw = doc.data.get("timestamp")
        if isinstance(raw, datetime):
            return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
        if isinstance(raw, str):
            try:
                parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
            except ValueError:
                self._logger.warning("Unparseable timestamp on audit log %s: %r", doc.id, raw)
            else:
                return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
        return self._clock()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_collections(
        self,
        out_dir: Path,
        collection: Optional[str] = None,
    ) -> Path:
        """Write one collection, or every collection, to a JSON file.

        A single collection is written as a list of documents (``id``
        merged into each body) to ``<name>_<stamp>.json``; a full export
        is a mapping of collection name to such lists in
        ``firestore_full_export_<stamp>.json``.  Returns the file path.
        """
        out_dir.mkdir(parents=True, exist_ok=True)
        stamp = self._clock().strftime("%Y-%m-%dT%H-%M-%S")

        if collection:
            payload: Any = self._dump(collection)
            path = out_dir / f"{collection}_{stamp}.json"
            count = len(payload)
        else:
            names = self._store.list_collections()
            self._logger.info("Found %d collections: %s", len(names), ", ".join(names))
            payload = {name: self._dump(name) for name in names}
            path = out_dir / f"firestore_full_export_{stamp}.json"
            count = sum(len(docs) for docs in payload.values())

        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        self._logger.info("Exported %d documents to %s", count, path)
        return path

    def _dump(self, collection: str) -> list[Any]:
        docs: Iterable[Document] = self._store.list_all(collection)
        rows = [convert_to_json_safe({"id": doc.id, **doc.data}) for doc in docs]
        self._logger.info("Exporting %s: %d documents", collection, len(rows))
        return rows
