import json
from datetime import datetime, timedelta, timezone

import pytest

from arta_backend.services.maintenance import MaintenanceService

from .conftest import FIXED_NOW

AUDIT = "audit_logs"


@pytest.fixture
def service(store, logger):
    return MaintenanceService(store=store, logger=logger, clock=lambda: FIXED_NOW)


class TestAuditLogTtl:
    def test_backfills_missing_expiry_across_pages(self, service, store):
        for day in range(1, 8):
            store.seed(AUDIT, f"log{day}", {"action": "LOGIN", "timestamp": datetime(2025, 1, day, tzinfo=timezone.utc)})

        updated = service.set_audit_log_ttl(retention_days=7, batch_size=3)

        assert updated == 7
        assert store.collections[AUDIT]["log1"]["expiresAt"] == datetime(2025, 1, 8, tzinfo=timezone.utc)
        assert store.collections[AUDIT]["log7"]["expiresAt"] == datetime(2025, 1, 14, tzinfo=timezone.utc)

    def test_leaves_existing_expiry(self, service, store):
        kept = datetime(2030, 1, 1, tzinfo=timezone.utc)
        store.seed(AUDIT, "old", {"timestamp": datetime(2025, 1, 1, tzinfo=timezone.utc), "expiresAt": kept})
        store.seed(AUDIT, "new", {"timestamp": datetime(2025, 1, 2, tzinfo=timezone.utc)})

        assert service.set_audit_log_ttl(retention_days=30) == 1
        assert store.collections[AUDIT]["old"]["expiresAt"] == kept

    @pytest.mark.parametrize(
        "timestamp,expires_at",
        [
            ("2025-01-01T00:00:00Z", datetime(2025, 1, 2, tzinfo=timezone.utc)),
            (datetime(2025, 1, 1), datetime(2025, 1, 2, tzinfo=timezone.utc)),
            ("yesterday", FIXED_NOW + timedelta(days=1)),
            (None, FIXED_NOW + timedelta(days=1)),
        ],
    )
    def test_timestamp_forms(self, service, store, timestamp, expires_at):
        store.seed(AUDIT, "log", {"timestamp": timestamp})

        service.set_audit_log_ttl(retention_days=1)

        assert store.collections[AUDIT]["log"]["expiresAt"] == expires_at

    def test_empty_collection(self, service, store):
        assert service.set_audit_log_ttl(retention_days=7) == 0
        assert store.write_count(AUDIT) == 0


class TestExport:
    def test_single_collection(self, service, store, tmp_path):
        store.seed("feedbacks", "f1", {"rating": 4, "createdAt": FIXED_NOW})

        path = service.export_collections(tmp_path / "exports", "feedbacks")

        assert path.name == "feedbacks_2025-03-14T09-30-00.json"
        assert json.loads(path.read_text(encoding="utf-8")) == [
            {"id": "f1", "rating": 4, "createdAt": FIXED_NOW.isoformat()},
        ]

    def test_full_export(self, service, store, tmp_path):
        store.seed("feedbacks", "f1", {"rating": 4})
        store.seed("system_users", "uid1", {"email": "a@x.com"})

        path = service.export_collections(tmp_path)

        assert path.name == "firestore_full_export_2025-03-14T09-30-00.json"
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload == {
            "feedbacks": [{"id": "f1", "rating": 4}],
            "system_users": [{"id": "uid1", "email": "a@x.com"}],
        }
