"""
Credential Verifier.

Checks an email/password pair against Firebase Auth through the Identity
Toolkit REST endpoint ``accounts:signInWithPassword`` (the Admin SDK has
no password check).  Exactly one HTTP call per verification, bounded by
``AUTH_TIMEOUT_S``.

The result is three-way, not two-way:

* ``VERIFIED``: the provider accepted the password; carries ``localId``.
* ``REJECTED``: the provider positively judged the credential wrong
  (see ``PROVIDER_ERROR_MAP``).  Final: no legacy fallback.
* ``UNAVAILABLE``: network failure, timeout, 5xx, malformed body, missing
  API key, or any error code not known to be a credential judgement.
  Only this outcome lets the caller try the legacy hash.

The ID token and refresh token in a successful response are discarded
here and never leave this module.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from arta_backend.logger import StructuredLogger
from arta_backend.models.auth_models import (
    PROVIDER_ERROR_MAP,
    VerificationOutcome,
    VerificationResult,
)

DEFAULT_IDENTITY_TOOLKIT_URL: str = "https://identitytoolkit.googleapis.com/v1"
INVALID_LOGIN_CREDENTIALS: str = "INVALID_LOGIN_CREDENTIALS"


class CredentialVerifier:
    """Firebase Auth password check.

    Parameters
    ----------
    api_key:
        Firebase Web API key.  When empty every call is ``UNAVAILABLE``.
    logger:
        Structured logger.
    base_url:
        Identity Toolkit base URL (overridable for the Auth emulator).
    timeout_s:
        Bound on the whole request; a timeout is ``UNAVAILABLE``.
    transport:
        Optional ``httpx`` transport, used by tests to stub the provider.
    reject_invalid_login_credentials:
        Treat ``INVALID_LOGIN_CREDENTIALS`` as ``REJECTED``.  Projects with
        email-enumeration protection return it for a wrong password; it is
        also returned for accounts that exist only as legacy profiles, so
        enabling this blocks their fallback until they are provisioned.
    """

    def __init__(
        self,
        api_key: str,
        logger: StructuredLogger,
        base_url: str = DEFAULT_IDENTITY_TOOLKIT_URL,
        timeout_s: float = 8.0,
        transport: Optional[httpx.BaseTransport] = None,
        reject_invalid_login_credentials: bool = False,
    ) -> None:
        self._api_key = api_key
        self._logger = logger
        self._url = f"{base_url.rstrip('/')}/accounts:signInWithPassword"
        self._timeout = httpx.Timeout(timeout_s)
        self._transport = transport
        self._error_map: dict[str, VerificationOutcome] = dict(PROVIDER_ERROR_MAP)
        if reject_invalid_login_credentials:
            self._error_map[INVALID_LOGIN_CREDENTIALS] = VerificationOutcome.REJECTED

    def verify(self, email: str, password: str) -> VerificationResult:
        """Ask the provider whether *password* is correct for *email*."""
        if not self._api_key:
            return VerificationResult(
                outcome=VerificationOutcome.UNAVAILABLE,
                reason="FIREBASE_WEB_API_KEY not configured",
            )

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(
                    self._url,
                    params={"key": self._api_key},
                    json={
                        "email": email,
                        "password": password,
                        "returnSecureToken": True,
                    },
                )
        except httpx.TimeoutException as exc:
            self._logger.warning(
                "Firebase Auth password check timed out: %s", exc,
                extra={"event": "VERIFY_TIMEOUT"},
            )
            return VerificationResult(outcome=VerificationOutcome.UNAVAILABLE, reason="timeout")
        except httpx.HTTPError as exc:
            self._logger.warning(
                "Firebase Auth unreachable: %s", exc,
                extra={"event": "VERIFY_NETWORK_ERROR"},
            )
            return VerificationResult(
                outcome=VerificationOutcome.UNAVAILABLE, reason=type(exc).__name__,
            )

        return self._classify(response)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _classify(self, response: httpx.Response) -> VerificationResult:
        try:
            body: Any = response.json()
        except ValueError:
            return self._unavailable(response, "non-JSON response body")

        if not isinstance(body, dict):
            return self._unavailable(response, "unexpected response shape")

        if response.status_code == 200:
            uid = body.get("localId")
            if isinstance(uid, str) and uid:
                return VerificationResult(outcome=VerificationOutcome.VERIFIED, uid=uid)
            return self._unavailable(response, "success response without localId")

        if response.status_code >= 500:
            return self._unavailable(response, f"provider status {response.status_code}")

        code = self._error_code(body)
        outcome = self._error_map.get(code, VerificationOutcome.UNAVAILABLE)
        if outcome == VerificationOutcome.REJECTED:
            self._logger.info(
                "Firebase Auth rejected credentials (%s)", code,
                extra={"event": "VERIFY_REJECTED", "error_code": code},
            )
            return VerificationResult(outcome=outcome, reason=code)

        return self._unavailable(response, code or "unknown provider error")

    @staticmethod
    def _error_code(body: dict[str, Any]) -> str:
        """Extract the leading code from ``error.message``.

        Some messages carry a suffix, e.g.
        ``"TOO_MANY_ATTEMPTS_TRY_LATER : Access to this account ..."``.
        """
        error = body.get("error")
        if not isinstance(error, dict):
            return ""
        message = error.get("message")
        if not isinstance(message, str):
            return ""
        return message.split(":", 1)[0].strip()

    def _unavailable(self, response: httpx.Response, reason: str) -> VerificationResult:
        self._logger.warning(
            "Firebase Auth result not usable (status %d): %s",
            response.status_code,
            reason,
            extra={"event": "VERIFY_UNAVAILABLE"},
        )
        return VerificationResult(outcome=VerificationOutcome.UNAVAILABLE, reason=reason)
