from __future__ import annotations

import asyncio

import httpx
import pytest

from queueprobe.mock_service import decode_email_request, is_valid_address, validate_email_request
from queueprobe.models import HarnessConfig
from queueprobe.runner import default_probes, extended_probes, run_probes


def _cfg(port: int) -> HarnessConfig:
    return HarnessConfig(host="127.0.0.1", port=port, warmup_delay_ms=0, inter_probe_delay_ms=0)


def test_default_run_passes_against_stub(mock_service, quiet_console):
    result = asyncio.run(run_probes(default_probes(), _cfg(mock_service), console=quiet_console))
    assert (result.passed, result.total) == (4, 4)
    out = quiet_console.file.getvalue()
    assert "Health check: 200" in out
    assert "accepted" in out


def test_extended_run_passes_against_stub(mock_service, quiet_console):
    result = asyncio.run(run_probes(extended_probes(), _cfg(mock_service), console=quiet_console))
    assert (result.passed, result.total) == (6, 6)


def test_outcomes_are_stable_across_runs(mock_service, quiet_console):
    runs = [
        asyncio.run(run_probes(default_probes(), _cfg(mock_service), console=quiet_console))
        for _ in range(2)
    ]
    assert [o.ok for o in runs[0].outcomes] == [o.ok for o in runs[1].outcomes]


def test_stats_reflect_accepted_emails(mock_service):
    base = f"http://127.0.0.1:{mock_service}"
    with httpx.Client(base_url=base) as client:
        assert client.get("/api/v1/stats").json()["queue_length"] == 0
        r = client.post("/api/v1/send-email", json={"to": "a@example.com", "subject": "s", "body": "b"})
        assert r.status_code == 202
        assert r.json()["status"] == "accepted"
        stats = client.get("/api/v1/stats").json()
        assert stats == {"queue_length": 1, "retry_queue_length": 0, "dead_letter_count": 0, "is_closed": False}
        assert client.get("/nope").status_code == 404
        assert client.post("/api/v1/send-email", content=b"").status_code == 400


def test_validation_rules():
    ok = {"to": "test@example.com", "subject": "Test", "body": "Body"}
    assert validate_email_request(ok) is None
    assert validate_email_request({**ok, "to": "invalid-email"}) == "invalid email format"
    assert validate_email_request({**ok, "to": ""}) == "email address is required"
    assert validate_email_request({**ok, "subject": ""}) == "subject is required"
    assert validate_email_request({**ok, "body": ""}) == "body is required"


@pytest.mark.parametrize(
    "address",
    ["test@example.com", "user@localhost", "Alice <alice@example.com>", "first.last+tag@sub.example.org"],
)
def test_addresses_accepted_like_the_service(address):
    assert is_valid_address(address)


@pytest.mark.parametrize("address", ["invalid-email", "@example.com", "user@", "a@b@c", "<>"])
def test_addresses_rejected(address):
    assert not is_valid_address(address)


def test_request_shape():
    assert decode_email_request({"to": "a@b.io", "subject": None}) == {"to": "a@b.io", "subject": "", "body": ""}
    assert decode_email_request(None) == {"to": "", "subject": "", "body": ""}
    with pytest.raises(ValueError):
        decode_email_request(["not", "a", "dict"])
    with pytest.raises(ValueError):
        decode_email_request({"to": 42, "subject": "s", "body": "b"})


def test_status_codes_follow_the_service(mock_service):
    base = f"http://127.0.0.1:{mock_service}"
    with httpx.Client(base_url=base) as client:
        def post(payload):
            return client.post("/api/v1/send-email", json=payload).status_code

        assert post({"to": "user@localhost", "subject": "s", "body": "b"}) == 202
        assert post({"to": "Alice <alice@example.com>", "subject": "s", "body": "b"}) == 202
        assert post({"to": "invalid-email", "subject": "s", "body": "b"}) == 422
        assert post({"subject": "s", "body": "b"}) == 422
        assert post(["to", "subject", "body"]) == 400
        assert post({"to": 7, "subject": "s", "body": "b"}) == 400


def test_body_cap_reaches_real_requests(mock_service, quiet_console):
    cfg = _cfg(mock_service).model_copy(update={"max_body_bytes": 5})
    result = asyncio.run(run_probes(default_probes(), cfg, console=quiet_console))
    assert (result.passed, result.total) == (4, 4)
    out = quiet_console.file.getvalue()
    # /health answers "OK" (under the cap); the JSON answers are cut
    assert "Response: OK\n" in out
    assert "(truncated)" in out
    assert '"queue_length"' not in out
