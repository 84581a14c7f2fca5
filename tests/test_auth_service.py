"""AuthService maps reconciler outcomes onto typed results."""

from unittest.mock import MagicMock

import pytest

from arta_backend.models.auth_models import AuthErrorCode
from arta_backend.services.auth_service import AuthService
from arta_backend.services.errors import AccountInactive, InternalError, InvalidCredentials

from .conftest import USERS, legacy_profile
from .fakes import FakeVerifier, InMemoryDocumentStore


@pytest.fixture
def audit_store():
    return InMemoryDocumentStore()


def test_legacy_login_success(make_reconciler, store, logger, audit_store):
    store.seed(USERS, "legacy1", legacy_profile("b@x.com", "p1"))
    service = AuthService(
        reconciler=make_reconciler(FakeVerifier.unavailable()),
        logger=logger,
        audit_store=audit_store,
    )

    result = service.login("b@x.com", "p1")

    assert result.success
    assert result.via_legacy
    assert result.profile.id == "legacy1"
    assert "passwordHash" not in result.profile.model_dump(by_alias=True)
    assert "password_hash" not in result.profile.model_dump()
    (event,) = audit_store.collections["audit_logs"].values()
    assert event["action"] == "LOGIN"
    assert event["details"] == {"outcome": "legacy-hash-match"}


def test_wrong_password(make_reconciler, store, logger):
    store.seed(USERS, "legacy1", legacy_profile("b@x.com", "p1"))
    service = AuthService(reconciler=make_reconciler(FakeVerifier.unavailable()), logger=logger)

    result = service.login("b@x.com", "wrong")

    assert not result.success
    assert result.error_code == AuthErrorCode.INVALID_CREDENTIALS
    assert result.profile is None


@pytest.mark.parametrize(
    "error,code",
    [
        (InvalidCredentials("bad"), AuthErrorCode.INVALID_CREDENTIALS),
        (AccountInactive("inactive"), AuthErrorCode.ACCOUNT_INACTIVE),
        (InternalError("boom"), AuthErrorCode.INTERNAL_ERROR),
        (RuntimeError("unexpected"), AuthErrorCode.INTERNAL_ERROR),
    ],
)
def test_error_mapping(logger, error, code):
    reconciler = MagicMock()
    reconciler.login.side_effect = error
    service = AuthService(reconciler=reconciler, logger=logger)

    result = service.login("User@X.com ", "pw")

    assert not result.success
    assert result.error_code == code
    reconciler.login.assert_called_once_with("user@x.com", "pw")


def test_internal_error_message_is_generic(logger):
    reconciler = MagicMock()
    reconciler.login.side_effect = InternalError("Firestore deadline exceeded on system_users")
    service = AuthService(reconciler=reconciler, logger=logger)

    result = service.login("a@x.com", "pw")

    assert "Firestore" not in (result.error_message or "")


@pytest.mark.parametrize("email", ["not-an-email", "user@", "a b@x.com"])
def test_malformed_email_never_reaches_reconciler(logger, email):
    reconciler = MagicMock()
    service = AuthService(reconciler=reconciler, logger=logger)

    result = service.login(email, "pw")

    assert not result.success
    assert result.error_code == AuthErrorCode.INVALID_CREDENTIALS
    reconciler.login.assert_not_called()


def test_empty_email_is_left_to_reconciler(make_reconciler, logger):
    verifier = FakeVerifier.unavailable()
    service = AuthService(reconciler=make_reconciler(verifier), logger=logger)

    result = service.login("", "pw")

    assert result.error_code == AuthErrorCode.INVALID_CREDENTIALS
    assert verifier.calls == []


@pytest.mark.parametrize(
    "email,valid",
    [
        ("admin@vserve.gov.ph", True),
        ("first.last+tag@example.co", True),
        ("no-at-sign.example.com", False),
        ("user@", False),
        ("", False),
        ("   ", False),
    ],
)
def test_validate_email(email, valid):
    assert AuthService.validate_email(email) is valid
