"""
Gate relay core: authorization, command signing and dispatch.
"""
from gate_relay.core.gate.models import (
    GateAction,
    GateCommand,
    SignedEnvelope,
    RegisteredKey,
    TrustStore,
)
from gate_relay.core.gate.command_signer import CommandSigner, verify_envelope
from gate_relay.core.gate.dispatcher import DispatchResult, RelayDispatcher
from gate_relay.core.gate.orchestrator import (
    ActionRequest,
    AuthorizationState,
    GateAuthorizer,
    GateOutcome,
)

__all__ = [
    "GateAction",
    "GateCommand",
    "SignedEnvelope",
    "RegisteredKey",
    "TrustStore",
    "CommandSigner",
    "verify_envelope",
    "DispatchResult",
    "RelayDispatcher",
    "ActionRequest",
    "AuthorizationState",
    "GateAuthorizer",
    "GateOutcome",
]
