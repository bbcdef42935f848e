"""
Action Signature Verification

Verifies that a requested gate action was signed by the private key matching
a presented public key.

Signed message:
    The UTF-8 bytes of the action name exactly as transmitted ("OPEN",
    "STOP" or "CLOSE"), with no added framing.

Scheme:
    RSASSA-PKCS1-v1_5 with SHA-256.
"""

import base64

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from gate_relay.core.signing.keys import base64_to_public_key, decode_base64

import logging

logger = logging.getLogger(__name__)


def create_signed_message(action: str) -> bytes:
    """Bytes a client signs for the given action."""
    return action.encode("utf-8")


def verify_action_signature(action: str, public_key_b64: str, signature_b64: str) -> bool:
    """
    Verify a client's signature over a gate action.

    A signature that simply does not match is an expected outcome and yields
    False. Undecodable inputs are a different fault and raise instead.

    Args:
        action: Action name as transmitted
        public_key_b64: Claimed public key (base64 DER SPKI or PEM)
        signature_b64: Base64-encoded signature

    Returns:
        True if the signature is authentic

    Raises:
        MalformedKeyMaterialError: If the key or signature cannot be decoded
    """
    public_key = base64_to_public_key(public_key_b64)
    signature = decode_base64(signature_b64, "signature")

    try:
        public_key.verify(
            signature,
            create_signed_message(action),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except InvalidSignature:
        return False
    return True


def sign_action(private_key, action: str) -> str:
    """
    Sign an action (for testing and client implementation reference).

    Args:
        private_key: RSA private key
        action: Action name

    Returns:
        Base64-encoded signature to send as "signature"
    """
    signature = private_key.sign(
        create_signed_message(action),
        padding.PKCS1v15(),
        hashes.SHA256(),
    )
    return base64.b64encode(signature).decode("ascii")
