"""Firebase Auth password check classification."""

import json

import httpx
import pytest

from arta_backend.models.auth_models import VerificationOutcome
from arta_backend.services.credential_verifier import CredentialVerifier


def make_verifier(logger, handler, api_key="test-key"):
    return CredentialVerifier(
        api_key=api_key,
        logger=logger,
        base_url="https://identitytoolkit.test/v1",
        timeout_s=2.0,
        transport=httpx.MockTransport(handler),
    )


def error_body(message: str) -> dict:
    return {"error": {"code": 400, "message": message, "errors": [{"message": message}]}}


class TestVerified:
    def test_returns_local_id(self, logger):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"localId": "uid123", "idToken": "secret-token", "refreshToken": "r"},
            )

        result = make_verifier(logger, handler).verify("c@x.com", "pw")

        assert result.outcome == VerificationOutcome.VERIFIED
        assert result.uid == "uid123"
        assert "secret-token" not in result.model_dump_json()

        (request,) = seen
        assert request.method == "POST"
        assert request.url.path == "/v1/accounts:signInWithPassword"
        assert request.url.params["key"] == "test-key"
        assert json.loads(request.content) == {
            "email": "c@x.com",
            "password": "pw",
            "returnSecureToken": True,
        }

    def test_success_without_local_id_is_unavailable(self, logger):
        result = make_verifier(logger, lambda r: httpx.Response(200, json={})).verify("c@x.com", "pw")

        assert result.outcome == VerificationOutcome.UNAVAILABLE
        assert result.uid is None


class TestRejected:
    @pytest.mark.parametrize(
        "message",
        [
            "INVALID_PASSWORD",
            "USER_DISABLED",
            "TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account has been temporarily disabled",
        ],
    )
    def test_credential_judgements(self, logger, message):
        verifier = make_verifier(logger, lambda r: httpx.Response(400, json=error_body(message)))

        result = verifier.verify("b@x.com", "pw")

        assert result.outcome == VerificationOutcome.REJECTED
        assert result.reason == message.split(":")[0].strip()

    def test_invalid_login_credentials_when_configured(self, logger):
        verifier = CredentialVerifier(
            api_key="test-key",
            logger=logger,
            transport=httpx.MockTransport(
                lambda r: httpx.Response(400, json=error_body("INVALID_LOGIN_CREDENTIALS")),
            ),
            reject_invalid_login_credentials=True,
        )

        result = verifier.verify("b@x.com", "pw")

        assert result.outcome == VerificationOutcome.REJECTED
        assert result.reason == "INVALID_LOGIN_CREDENTIALS"

    def test_other_codes_unaffected_by_flag(self, logger):
        verifier = CredentialVerifier(
            api_key="test-key",
            logger=logger,
            transport=httpx.MockTransport(
                lambda r: httpx.Response(400, json=error_body("EMAIL_NOT_FOUND")),
            ),
            reject_invalid_login_credentials=True,
        )

        assert verifier.verify("b@x.com", "pw").outcome == VerificationOutcome.UNAVAILABLE


class TestUnavailable:
    @pytest.mark.parametrize(
        "message",
        ["EMAIL_NOT_FOUND", "INVALID_LOGIN_CREDENTIALS", "OPERATION_NOT_ALLOWED", "API key not valid."],
    )
    def test_non_judgement_codes(self, logger, message):
        verifier = make_verifier(logger, lambda r: httpx.Response(400, json=error_body(message)))

        assert verifier.verify("b@x.com", "pw").outcome == VerificationOutcome.UNAVAILABLE

    def test_server_error(self, logger):
        verifier = make_verifier(
            logger, lambda r: httpx.Response(503, json=error_body("INVALID_PASSWORD")),
        )

        assert verifier.verify("b@x.com", "pw").outcome == VerificationOutcome.UNAVAILABLE

    def test_non_json_body(self, logger):
        verifier = make_verifier(logger, lambda r: httpx.Response(502, text="<html>Bad gateway</html>"))

        assert verifier.verify("b@x.com", "pw").outcome == VerificationOutcome.UNAVAILABLE

    def test_unexpected_json_shape(self, logger):
        verifier = make_verifier(logger, lambda r: httpx.Response(400, json=["INVALID_PASSWORD"]))

        assert verifier.verify("b@x.com", "pw").outcome == VerificationOutcome.UNAVAILABLE

    def test_connection_error(self, logger):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        assert make_verifier(logger, handler).verify("b@x.com", "pw").outcome == VerificationOutcome.UNAVAILABLE

    def test_timeout(self, logger):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result = make_verifier(logger, handler).verify("b@x.com", "pw")

        assert result.outcome == VerificationOutcome.UNAVAILABLE
        assert result.reason == "timeout"

    def test_missing_api_key_makes_no_request(self, logger):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"localId": "uid"})

        result = make_verifier(logger, handler, api_key="").verify("b@x.com", "pw")

        assert result.outcome == VerificationOutcome.UNAVAILABLE
        assert calls == []
