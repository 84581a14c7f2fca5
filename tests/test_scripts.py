from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

from arta_backend.models.service_models import ProvisioningSummary
from arta_backend.scripts import export_firestore, provision_auth_users, seed_legacy_users, set_audit_log_ttl
from arta_backend.services.last_login import LastLoginRecorder

from .conftest import FIXED_NOW, USERS, legacy_profile


class TestSeedLegacyUsers:
    def test_no_users_configured(self, monkeypatch):
        for prefix in ("ADMIN", "EDITOR", "ANALYST", "VIEWER"):
            monkeypatch.delenv(f"{prefix}_EMAIL", raising=False)

        with patch.object(seed_legacy_users, "build_services") as build:
            assert seed_legacy_users.main([]) == 1
        build.assert_not_called()

    def test_seeds_configured_roles(self, monkeypatch, capsys):
        monkeypatch.setenv("EDITOR_EMAIL", "editor@x.com")
        monkeypatch.setenv("EDITOR_PASSWORD", "pw")
        provisioning = MagicMock()
        provisioning.seed_all.return_value = ProvisioningSummary(created=["editor@x.com"])

        with patch.object(
            seed_legacy_users,
            "build_services",
            return_value=({"user_provisioning_service": provisioning}, MagicMock()),
        ):
            assert seed_legacy_users.main(["--roles", "EDITOR"]) == 0

        (requests,), _ = provisioning.seed_all.call_args
        assert [r.email for r in requests] == ["editor@x.com"]
        assert "Created: editor@x.com" in capsys.readouterr().out


def test_provision_reports_errors(monkeypatch):
    monkeypatch.setenv("ADMIN_EMAIL", "admin@x.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "pw")
    provisioning = MagicMock()
    provisioning.provision_all.return_value = ProvisioningSummary(errors={"admin@x.com": "boom"})

    with patch.object(
        provision_auth_users,
        "build_services",
        return_value=({"user_provisioning_service": provisioning}, MagicMock()),
    ):
        assert provision_auth_users.main(["--roles", "ADMIN"]) == 1


def test_ttl_defaults_to_configured_retention():
    maintenance = MagicMock()
    maintenance.set_audit_log_ttl.return_value = 3
    config = MagicMock(AUDIT_LOG_RETENTION_DAYS=30)

    with patch.object(
        set_audit_log_ttl,
        "build_services",
        return_value=({"maintenance_service": maintenance}, config),
    ):
        assert set_audit_log_ttl.main(["--batch-size", "900"]) == 0

    maintenance.set_audit_log_ttl.assert_called_once_with(retention_days=30, batch_size=500)


def test_export_failure_exit_code(tmp_path):
    maintenance = MagicMock()
    maintenance.export_collections.side_effect = RuntimeError("permission denied")

    with patch.object(
        export_firestore,
        "build_services",
        return_value=({"maintenance_service": maintenance}, MagicMock()),
    ):
        assert export_firestore.main(["feedbacks", "--out", str(tmp_path)]) == 1

    maintenance.export_collections.assert_called_once_with(tmp_path, "feedbacks")


def test_last_login_on_executor(profile_repo, store, logger):
    store.seed(USERS, "legacy1", legacy_profile("b@x.com", "p1"))

    with ThreadPoolExecutor(max_workers=1) as executor:
        LastLoginRecorder(repo=profile_repo, logger=logger, executor=executor).record("legacy1", FIXED_NOW)

    assert store.collections[USERS]["legacy1"]["lastLoginAt"] == FIXED_NOW


def test_last_login_after_executor_shutdown(profile_repo, store, logger):
    executor = ThreadPoolExecutor(max_workers=1)
    executor.shutdown()

    LastLoginRecorder(repo=profile_repo, logger=logger, executor=executor).record("legacy1", FIXED_NOW)

    assert store.write_count(USERS) == 0
