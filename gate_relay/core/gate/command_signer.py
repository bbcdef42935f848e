"""
Gate Command Signing

Mints the command envelope sent to the gate controller:

    {"value": {"action": ..., "nonce": ..., "expiry": ...}, "signature": ...}

The signature is base64 HMAC-SHA256 over the canonical JSON of "value"
(compact separators, sorted keys), keyed with the shared gate secret.
Every call draws a fresh nonce and expiry; envelopes are never reused.
"""

import base64
import hashlib
import hmac
import json
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from gate_relay.core.gate.models import GateAction, GateCommand, SignedEnvelope

DEFAULT_COMMAND_WINDOW_SECONDS = 60
NONCE_BITS = 32

Clock = Callable[[], datetime]
NonceSource = Callable[[], int]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def random_nonce() -> int:
    """Uniform unsigned 32-bit nonce from the OS CSPRNG."""
    return secrets.randbits(NONCE_BITS)


def canonical_json(value: Dict[str, Any]) -> bytes:
    """Deterministic, minimal JSON for signing."""
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False).encode("utf-8")


def compute_mac(secret: str, value: Dict[str, Any]) -> str:
    digest = hmac.new(secret.encode("utf-8"), canonical_json(value), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


class CommandSigner:
    """
    Builds HMAC-signed gate commands.

    The clock and nonce source are injectable so tests can pin the output.
    """

    def __init__(
        self,
        secret: str,
        window_seconds: int = DEFAULT_COMMAND_WINDOW_SECONDS,
        clock: Optional[Clock] = None,
        nonce_source: Optional[NonceSource] = None,
    ):
        if not secret:
            raise ValueError("Gate HMAC secret must not be empty")
        if window_seconds <= 0:
            raise ValueError(f"Command window must be positive, got {window_seconds}")
        self._secret = secret
        self.window = timedelta(seconds=window_seconds)
        self._clock = clock or utc_now
        self._nonce_source = nonce_source or random_nonce

    def build_command(self, action: GateAction) -> GateCommand:
        nonce = self._nonce_source()
        if not 0 <= nonce < 2 ** NONCE_BITS:
            raise ValueError(f"Nonce out of 32-bit range: {nonce}")
        return GateCommand(
            action=GateAction(action),
            nonce=nonce,
            expiry=self._clock() + self.window,
        )

    def sign(self, action: GateAction) -> SignedEnvelope:
        """
        Mint a new signed envelope for an action.

        Args:
            action: Authorized gate action

        Returns:
            SignedEnvelope with a fresh nonce and expiry
        """
        command = self.build_command(action)
        return SignedEnvelope(value=command, signature=compute_mac(self._secret, command.to_dict()))


def verify_envelope(payload: Dict[str, Any], secret: str) -> bool:
    """
    Check an envelope's MAC (reference for gate controller implementations).

    Args:
        payload: Envelope as posted on the wire
        secret: Shared gate secret

    Returns:
        True if the signature matches the value
    """
    value = payload.get("value")
    signature = payload.get("signature")
    if not isinstance(value, dict) or not isinstance(signature, str):
        return False
    expected = compute_mac(secret, value)
    return hmac.compare_digest(expected, signature)
