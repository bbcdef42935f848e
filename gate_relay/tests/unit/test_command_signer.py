"""
Unit tests for gate command signing.
"""
import base64
import hashlib
import hmac
from datetime import datetime, timedelta, timezone

import pytest

from gate_relay.core.gate import CommandSigner, GateAction, verify_envelope
from gate_relay.core.gate.command_signer import canonical_json, random_nonce
from gate_relay.core.gate.models import format_expiry

SECRET = "shared-gate-secret"
FIXED_NOW = datetime(2026, 10, 18, 12, 0, 0, 250000, tzinfo=timezone.utc)


@pytest.fixture
def signer():
    return CommandSigner(
        SECRET,
        window_seconds=60,
        clock=lambda: FIXED_NOW,
        nonce_source=lambda: 123456789,
    )


class TestCommandSigner:
    """Test CommandSigner.sign()"""

    def test_envelope_fields(self, signer):
        envelope = signer.sign(GateAction.OPEN)

        assert envelope.value.action is GateAction.OPEN
        assert envelope.value.nonce == 123456789
        assert envelope.value.expiry == FIXED_NOW + timedelta(seconds=60)

    def test_wire_payload(self, signer):
        payload = signer.sign(GateAction.STOP).to_payload()

        assert payload["value"] == {
            "action": "STOP",
            "nonce": 123456789,
            "expiry": "2026-10-18T12:01:00.250Z",
        }
        assert isinstance(payload["signature"], str)

    def test_signature_is_hmac_over_canonical_value(self, signer):
        payload = signer.sign(GateAction.CLOSE).to_payload()

        message = b'{"action":"CLOSE","expiry":"2026-10-18T12:01:00.250Z","nonce":123456789}'
        expected = base64.b64encode(hmac.new(SECRET.encode(), message, hashlib.sha256).digest()).decode()
        assert payload["signature"] == expected

    def test_mac_verifies_with_shared_secret(self, signer):
        payload = signer.sign(GateAction.OPEN).to_payload()
        assert verify_envelope(payload, SECRET) is True
        assert verify_envelope(payload, "wrong-secret") is False

    def test_tampered_value_fails_verification(self, signer):
        payload = signer.sign(GateAction.CLOSE).to_payload()
        payload["value"]["action"] = "OPEN"
        assert verify_envelope(payload, SECRET) is False

    def test_expiry_is_creation_plus_window(self):
        ticks = iter([FIXED_NOW, FIXED_NOW + timedelta(seconds=7)])
        signer = CommandSigner(SECRET, window_seconds=90, clock=lambda: next(ticks))

        first = signer.sign(GateAction.OPEN)
        second = signer.sign(GateAction.OPEN)

        assert first.value.expiry == FIXED_NOW + timedelta(seconds=90)
        assert second.value.expiry == FIXED_NOW + timedelta(seconds=97)
        assert first.value.expiry > FIXED_NOW

    def test_each_sign_draws_new_nonce(self):
        nonces = iter([1, 2, 3])
        signer = CommandSigner(SECRET, clock=lambda: FIXED_NOW, nonce_source=lambda: next(nonces))

        envelopes = [signer.sign(GateAction.OPEN) for _ in range(3)]

        assert [e.value.nonce for e in envelopes] == [1, 2, 3]
        assert len({e.signature for e in envelopes}) == 3

    def test_rejects_out_of_range_nonce(self):
        signer = CommandSigner(SECRET, nonce_source=lambda: 2 ** 32)
        with pytest.raises(ValueError, match="32-bit"):
            signer.sign(GateAction.OPEN)

    def test_rejects_empty_secret(self):
        with pytest.raises(ValueError):
            CommandSigner("")

    def test_rejects_non_positive_window(self):
        with pytest.raises(ValueError):
            CommandSigner(SECRET, window_seconds=0)

    def test_default_clock_expiry_in_future(self):
        before = datetime.now(timezone.utc)
        envelope = CommandSigner(SECRET).sign(GateAction.OPEN)
        assert envelope.value.expiry > before + timedelta(seconds=59)


class TestNonceSource:
    """Default nonce source is uniform random, not a counter."""

    def test_nonces_within_32_bits(self):
        assert all(0 <= random_nonce() < 2 ** 32 for _ in range(1000))

    def test_nonces_not_sequential(self):
        nonces = [random_nonce() for _ in range(200)]
        # 200 draws from 2**32 collide with probability ~5e-6
        assert len(set(nonces)) == len(nonces)
        deltas = {b - a for a, b in zip(nonces, nonces[1:])}
        assert len(deltas) > 1


def test_canonical_json_is_compact_and_sorted():
    assert canonical_json({"nonce": 1, "action": "OPEN"}) == b'{"action":"OPEN","nonce":1}'


def test_format_expiry_converts_to_utc():
    local = datetime(2026, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert format_expiry(local) == "2026-01-01T12:00:00.000Z"


def test_verify_envelope_rejects_malformed_payload():
    assert verify_envelope({"value": "nope", "signature": "x"}, SECRET) is False
    assert verify_envelope({}, SECRET) is False
