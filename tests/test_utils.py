import json
import logging
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from arta_backend.logger import JSONFormatter
from arta_backend.utils.general import convert_to_json_safe
from arta_backend.utils.passwords import hash_legacy_password, verify_legacy_password


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="arta.test", level=logging.WARNING, pathname=__file__, lineno=1,
        msg="Last-login update failed for %s", args=("uid1",), exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_formatter_lifts_event():
    line = JSONFormatter().format(make_record(event="LAST_LOGIN_FAILED", profile_id="uid1"))

    entry = json.loads(line)
    assert entry["level"] == "WARNING"
    assert entry["message"] == "Last-login update failed for uid1"
    assert entry["event"] == "LAST_LOGIN_FAILED"
    assert entry["extra"] == {"profile_id": "uid1"}


def test_formatter_without_extra():
    entry = json.loads(JSONFormatter().format(make_record()))

    assert "event" not in entry
    assert "extra" not in entry


def test_formatter_stringifies_unknown_values():
    at = datetime(2025, 3, 14, tzinfo=timezone.utc)

    entry = json.loads(JSONFormatter().format(make_record(at=at)))

    assert entry["extra"]["at"] == str(at)


def test_convert_to_json_safe():
    at = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)

    converted = convert_to_json_safe(
        {
            "createdAt": at,
            "score": Decimal("4.5"),
            "bad": float("nan"),
            "tags": ("a", "b"),
            "raw": b"\x00\x01",
            "nested": {"when": at.date()},
        }
    )

    assert converted == {
        "createdAt": "2025-03-14T09:30:00+00:00",
        "score": 4.5,
        "bad": None,
        "tags": ["a", "b"],
        "raw": "AAE=",
        "nested": {"when": "2025-03-14"},
    }
    json.dumps(converted)


@pytest.mark.parametrize(
    "stored",
    [
        hash_legacy_password("p1"),
        hash_legacy_password("p1").upper(),
        f"  {hash_legacy_password('p1')}\n",
    ],
)
def test_legacy_hash_matches(stored):
    assert verify_legacy_password("p1", stored)


def test_legacy_hash_is_hex_sha256():
    assert hash_legacy_password("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_legacy_hash_mismatch():
    assert not verify_legacy_password("p2", hash_legacy_password("p1"))
    assert not verify_legacy_password("p1", "")
