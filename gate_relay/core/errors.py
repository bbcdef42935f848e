"""
Gate relay error taxonomy.

Authorization-path errors never leave the service as-is: the orchestrator
collapses them into one generic Unauthorized outcome. Dispatch errors come
from the trusted downstream controller and are surfaced to the caller.
"""
from typing import Optional


class GateRelayError(Exception):
    """Base class for gate relay failures."""
    pass


class ConfigurationError(GateRelayError):
    """Required configuration (shared secret, gate URL) is missing."""
    pass


class UnauthorizedKeyError(GateRelayError):
    """Presented public key is unregistered or not trusted."""
    pass


class InvalidSignatureError(GateRelayError):
    """Signature does not verify against the claimed public key."""
    pass


class MalformedKeyMaterialError(InvalidSignatureError):
    """Public key or signature bytes could not be decoded."""
    pass


class DispatchError(GateRelayError):
    """Gate controller could not be reached."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
