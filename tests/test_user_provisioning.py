from unittest.mock import MagicMock

import pytest

from arta_backend.models.auth_models import ProviderUser
from arta_backend.models.enums import UserRole
from arta_backend.models.service_models import AccountRequest
from arta_backend.services.identity_directory import UserNotFoundError
from arta_backend.services.user_provisioning import UserProvisioningService, users_from_env
from arta_backend.utils.passwords import hash_legacy_password

from .conftest import FIXED_NOW, USERS, legacy_profile, linked_profile
from .fakes import InMemoryDocumentStore


def admin_request(**overrides) -> AccountRequest:
    data = {
        "name": "Admin User",
        "email": "Admin@vserve.gov.ph",
        "password": "s3cret!",
        "role": UserRole.ADMINISTRATOR,
        "department": "IT Administration",
    }
    data.update(overrides)
    return AccountRequest(**data)


@pytest.fixture
def auth_directory():
    directory = MagicMock()
    directory.get_user_by_email.side_effect = UserNotFoundError("No user record found")
    directory.create_user.side_effect = lambda email, **kwargs: ProviderUser(uid="new-uid", email=email)
    directory.update_user.side_effect = lambda uid, **kwargs: ProviderUser(uid=uid)
    return directory


@pytest.fixture
def audit_store():
    return InMemoryDocumentStore()


@pytest.fixture
def service(profile_repo, auth_directory, logger, audit_store):
    return UserProvisioningService(
        repo=profile_repo,
        directory=auth_directory,
        logger=logger,
        clock=lambda: FIXED_NOW,
        audit_store=audit_store,
    )


class TestProvision:
    def test_creates_account_and_profile(self, service, auth_directory, store, audit_store):
        profile = service.provision(admin_request())

        auth_directory.create_user.assert_called_once_with(
            email="admin@vserve.gov.ph",
            password="s3cret!",
            display_name="Admin User",
            email_verified=True,
        )
        auth_directory.set_custom_claims.assert_called_once_with(
            "new-uid", {"role": "administrator", "isAdmin": True},
        )
        assert profile.id == "new-uid"
        body = store.collections[USERS]["new-uid"]
        assert body["firebaseUid"] == "new-uid"
        assert body["role"] == "Administrator"
        assert body["createdAt"] == FIXED_NOW
        (event,) = audit_store.collections["audit_logs"].values()
        assert event["action"] == "PROVISION"
        assert event["details"] == {"role": "Administrator", "created": True}

    def test_updates_existing_account(self, service, auth_directory, store):
        auth_directory.get_user_by_email.side_effect = None
        auth_directory.get_user_by_email.return_value = ProviderUser(uid="uid5", email="v@x.com")
        store.seed(USERS, "uid5", linked_profile("v@x.com", "uid5"))

        profile = service.provision(admin_request(email="v@x.com", role=UserRole.VIEWER))

        auth_directory.create_user.assert_not_called()
        auth_directory.update_user.assert_called_once_with(
            "uid5", password="s3cret!", display_name="Admin User",
        )
        auth_directory.set_custom_claims.assert_called_once_with(
            "uid5", {"role": "viewer", "isAdmin": False},
        )
        assert profile.created_at is None
        body = store.collections[USERS]["uid5"]
        assert body["createdAt"] != FIXED_NOW
        assert body["updatedAt"] == FIXED_NOW

    def test_provision_all_collects_errors(self, service, auth_directory):
        auth_directory.set_custom_claims.side_effect = [None, RuntimeError("quota exceeded")]

        summary = service.provision_all(
            [admin_request(), admin_request(email="e@x.com", role=UserRole.EDITOR)],
        )

        assert summary.created == ["admin@vserve.gov.ph"]
        assert summary.errors == {"e@x.com": "quota exceeded"}
        assert summary.has_errors


class TestSeedLegacy:
    def test_creates_hash_only_profile(self, service, store):
        profile = service.seed_legacy(admin_request(role=UserRole.EDITOR))

        body = store.collections[USERS][profile.id]
        assert body["passwordHash"] == hash_legacy_password("s3cret!")
        assert "firebaseUid" not in body
        assert "lastLoginAt" not in body
        assert body["status"] == "Active"

    def test_skips_existing_email(self, service, store):
        store.seed(USERS, "legacy1", legacy_profile("admin@vserve.gov.ph", "old"))

        summary = service.seed_all([admin_request()])

        assert summary.skipped == ["admin@vserve.gov.ph"]
        assert store.write_count(USERS) == 0


class TestDeactivate:
    def test_flips_status(self, service, store, audit_store):
        store.seed(USERS, "uid1", linked_profile("a@x.com", "uid1"))

        result = service.deactivate("uid1", actor="admin-uid")

        assert result.success
        assert store.collections[USERS]["uid1"]["status"] == "Inactive"
        (event,) = audit_store.collections["audit_logs"].values()
        assert event["action"] == "DEACTIVATE"
        assert event["userId"] == "admin-uid"

    def test_unknown_profile(self, service):
        result = service.deactivate("missing")

        assert not result.success
        assert result.status_code == 404

    def test_storage_failure(self, service, store):
        store.fail["get"] = RuntimeError("unavailable")

        result = service.deactivate("uid1")

        assert result.status_code == 500


def test_users_from_env_skips_incomplete_prefixes():
    environ = {
        "ADMIN_EMAIL": "admin@x.com",
        "ADMIN_PASSWORD": "pw",
        "EDITOR_EMAIL": "editor@x.com",
        "VIEWER_EMAIL": "viewer@x.com",
        "VIEWER_PASSWORD": "pw",
        "VIEWER_NAME": "Front Desk",
    }

    requests = users_from_env(["ADMIN", "EDITOR", "VIEWER"], environ)

    assert [r.email for r in requests] == ["admin@x.com", "viewer@x.com"]
    assert requests[0].name == "Admin User"
    assert requests[0].department == "IT Administration"
    assert requests[1].name == "Front Desk"
    assert requests[1].role == UserRole.VIEWER


def test_users_from_env_unknown_prefix():
    with pytest.raises(KeyError):
        users_from_env(["ROOT"], {})
