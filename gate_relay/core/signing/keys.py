"""
RSA Public Key Handling

Decodes client public keys presented with gate requests. Keys travel as
base64-encoded DER SubjectPublicKeyInfo; a PEM block is accepted as well.
Uses the cryptography library for all cryptographic operations.
"""

import base64
import binascii
import hashlib

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from gate_relay.core.errors import MalformedKeyMaterialError

PEM_PREFIX = "-----BEGIN"


def decode_base64(value: str, what: str) -> bytes:
    """
    Strictly decode a base64 string.

    Raises:
        MalformedKeyMaterialError: If the value is not valid base64
    """
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise MalformedKeyMaterialError(f"Invalid base64 {what}: {e}") from e


def public_key_to_base64(public_key: RSAPublicKey) -> str:
    """
    Serialize a public key to the base64 SPKI form clients register.

    Args:
        public_key: RSA public key object

    Returns:
        Base64-encoded DER SubjectPublicKeyInfo
    """
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(der).decode("ascii")


def base64_to_public_key(encoded_key: str) -> RSAPublicKey:
    """
    Deserialize a client public key.

    Args:
        encoded_key: Base64 DER SPKI, or a PEM "PUBLIC KEY" block

    Returns:
        RSA public key object

    Raises:
        MalformedKeyMaterialError: If the key cannot be decoded or is not RSA
    """
    try:
        if encoded_key.lstrip().startswith(PEM_PREFIX):
            public_key = serialization.load_pem_public_key(encoded_key.encode("utf-8"))
        else:
            der = decode_base64(encoded_key, "public key")
            public_key = serialization.load_der_public_key(der)
    except MalformedKeyMaterialError:
        raise
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise MalformedKeyMaterialError(f"Invalid public key: {e}") from e

    if not isinstance(public_key, RSAPublicKey):
        raise MalformedKeyMaterialError(f"Not an RSA key: {type(public_key).__name__}")
    return public_key


def key_fingerprint(encoded_key: str) -> str:
    """Short, log-safe identifier for a presented key string."""
    return hashlib.sha256(encoded_key.encode("utf-8")).hexdigest()[:16]
