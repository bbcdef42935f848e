"""
Client Request Signing Module

RSA (PKCS#1 v1.5, SHA-256) signatures over gate actions, used to prove
possession of a registered private key.
"""

from gate_relay.core.signing.keys import (
    base64_to_public_key,
    public_key_to_base64,
    key_fingerprint,
)
from gate_relay.core.signing.verify import (
    verify_action_signature,
    create_signed_message,
    sign_action,
)

__all__ = [
    # Keys
    "base64_to_public_key",
    "public_key_to_base64",
    "key_fingerprint",
    # Verification
    "verify_action_signature",
    "create_signed_message",
    "sign_action",
]
