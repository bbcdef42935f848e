"""
Gate relay data model.

GateAction is a closed set: anything else is rejected before it reaches the
verifier. GateCommand and SignedEnvelope are minted per authorized request and
never persisted.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Protocol


class GateAction(str, Enum):
    """Actions a gate controller accepts."""
    OPEN = "OPEN"
    STOP = "STOP"
    CLOSE = "CLOSE"


@dataclass(frozen=True)
class RegisteredKey:
    """Trust store view of a registered public key."""
    identifier: str
    trusted: bool


class TrustStore(Protocol):
    """Read-only registry lookup used during authorization."""

    def find_by_key(self, identifier: str) -> Optional[RegisteredKey]:
        ...


def format_expiry(moment: datetime) -> str:
    """
    Render a timestamp as ISO-8601 UTC with millisecond precision.

    Example:
        >>> format_expiry(datetime(2026, 1, 1, 12, 1, tzinfo=timezone.utc))
        '2026-01-01T12:01:00.000Z'
    """
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class GateCommand:
    """
    Command value sent to the gate controller.

    Attributes:
        action: Requested gate action
        nonce: Unsigned 32-bit random value, unique per command
        expiry: Absolute UTC time after which the controller rejects the command
    """
    action: GateAction
    nonce: int
    expiry: datetime

    def to_dict(self) -> Dict[str, Any]:
        # Key order matches the sorted canonical form, so the wire bytes are the signed bytes
        return {
            "action": self.action.value,
            "expiry": format_expiry(self.expiry),
            "nonce": self.nonce,
        }


@dataclass(frozen=True)
class SignedEnvelope:
    """GateCommand plus base64 HMAC-SHA256 over its canonical JSON."""
    value: GateCommand
    signature: str

    def to_payload(self) -> Dict[str, Any]:
        """Wire format posted to the gate controller."""
        return {"value": self.value.to_dict(), "signature": self.signature}
