import io
from datetime import datetime, timezone

import pytest

from arta_backend.logger import StructuredLogger
from arta_backend.repositories.profile_repository import ProfileRepository
from arta_backend.services.last_login import LastLoginRecorder
from arta_backend.services.profile_reconciler import ProfileReconciler
from arta_backend.utils.passwords import hash_legacy_password

from .fakes import FakeDirectory, FakeVerifier, InMemoryDocumentStore

FIXED_NOW = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)
USERS = "system_users"


@pytest.fixture(scope="session")
def logger(tmp_path_factory) -> StructuredLogger:
    log_file = tmp_path_factory.mktemp("logs") / "test.log"
    return StructuredLogger(name="arta-tests", stream=io.StringIO(), log_file=str(log_file))


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def profile_repo(store, logger) -> ProfileRepository:
    return ProfileRepository(store=store, logger=logger)


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture
def make_reconciler(profile_repo, directory, logger):
    """Build a reconciler around a given verifier; last-login runs inline."""

    def _make(verifier: FakeVerifier, audit_store=None) -> ProfileReconciler:
        return ProfileReconciler(
            verifier=verifier,
            repo=profile_repo,
            directory=directory,
            last_login=LastLoginRecorder(repo=profile_repo, logger=logger),
            logger=logger,
            clock=lambda: FIXED_NOW,
            audit_store=audit_store,
        )

    return _make


def legacy_profile(email: str, password: str, **overrides) -> dict:
    """Firestore body of a profile created by the legacy seeding script."""
    data = {
        "name": "Legacy User",
        "email": email,
        "passwordHash": hash_legacy_password(password),
        "role": "Editor",
        "department": "Business Licensing",
        "status": "Active",
        "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "lastLoginAt": None,
    }
    data.update(overrides)
    return data


def linked_profile(email: str, uid: str, **overrides) -> dict:
    data = {
        "name": "Linked User",
        "email": email,
        "role": "Viewer",
        "department": "",
        "status": "Active",
        "firebaseUid": uid,
        "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return data
