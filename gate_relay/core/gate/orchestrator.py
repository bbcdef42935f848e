"""
Gate Authorization Orchestrator

Runs one gate request through:

    RECEIVED -> TRUST_CHECKED -> SIGNATURE_CHECKED -> DISPATCHED -> DONE

with UNAUTHORIZED reachable from RECEIVED (unknown or untrusted key) and
TRUST_CHECKED (bad or malformed signature). Every unauthorized cause yields
the same outcome so callers learn nothing about registry membership.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from gate_relay.core.errors import InvalidSignatureError, UnauthorizedKeyError
from gate_relay.core.gate.command_signer import CommandSigner
from gate_relay.core.gate.dispatcher import DispatchResult, RelayDispatcher
from gate_relay.core.gate.models import GateAction, SignedEnvelope, TrustStore
from gate_relay.core.signing import key_fingerprint, verify_action_signature

logger = logging.getLogger(__name__)

Verifier = Callable[[str, str, str], bool]


class AuthorizationState(Enum):
    RECEIVED = "received"
    TRUST_CHECKED = "trust_checked"
    SIGNATURE_CHECKED = "signature_checked"
    DISPATCHED = "dispatched"
    DONE = "done"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class ActionRequest:
    """Inbound gate request; lives for one call only."""
    action: GateAction
    public_key: str
    signature: str


@dataclass
class GateOutcome:
    """
    Result of handling one ActionRequest.

    Attributes:
        state: Final state (DONE or UNAUTHORIZED)
        envelope: Envelope sent to the gate, if authorized
        dispatch: Gate controller response, if authorized
    """
    state: AuthorizationState
    envelope: Optional[SignedEnvelope] = None
    dispatch: Optional[DispatchResult] = None

    @property
    def authorized(self) -> bool:
        return self.state is not AuthorizationState.UNAUTHORIZED


def _log_dispatch_completion(task: "asyncio.Future", action: GateAction, fingerprint: str) -> None:
    """
    Collect the dispatch outcome even when the caller has gone away.

    Retrieving the exception here keeps a failure after a client disconnect
    from surfacing as an unretrieved task exception.
    """
    if task.cancelled():
        logger.warning(f"Gate dispatch of {action.value} for key={fingerprint} was cancelled")
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Gate dispatch of {action.value} for key={fingerprint} failed: {error}")
    else:
        logger.info(
            f"Gate dispatch of {action.value} for key={fingerprint} finished: "
            f"status={task.result().status_code}"
        )


class GateAuthorizer:
    """Authenticates a client action and relays it to the gate."""

    def __init__(
        self,
        trust_store: TrustStore,
        signer: CommandSigner,
        dispatcher: RelayDispatcher,
        verifier: Verifier = verify_action_signature,
    ):
        self.trust_store = trust_store
        self.signer = signer
        self.dispatcher = dispatcher
        self.verifier = verifier

    async def _check_trust(self, request: ActionRequest) -> None:
        # Registry sessions are synchronous
        record = await asyncio.to_thread(self.trust_store.find_by_key, request.public_key)
        if record is None:
            raise UnauthorizedKeyError("key not registered")
        if not record.trusted:
            raise UnauthorizedKeyError("key not trusted")

    def _check_signature(self, request: ActionRequest) -> None:
        # Malformed input raises MalformedKeyMaterialError, an InvalidSignatureError
        if not self.verifier(request.action.value, request.public_key, request.signature):
            raise InvalidSignatureError("signature does not match key")

    async def handle(self, request: ActionRequest) -> GateOutcome:
        """
        Authorize and relay one gate action.

        Returns:
            GateOutcome; UNAUTHORIZED for every authorization failure

        Raises:
            DispatchError: If the gate controller could not be reached
        """
        state = AuthorizationState.RECEIVED
        fingerprint = key_fingerprint(request.public_key)
        try:
            await self._check_trust(request)
            state = AuthorizationState.TRUST_CHECKED
            self._check_signature(request)
            state = AuthorizationState.SIGNATURE_CHECKED
        except (UnauthorizedKeyError, InvalidSignatureError) as e:
            logger.warning(
                f"Unauthorized gate request: action={request.action.value} "
                f"key={fingerprint} stage={state.value} reason={type(e).__name__}: {e}"
            )
            return GateOutcome(state=AuthorizationState.UNAUTHORIZED)

        envelope = self.signer.sign(request.action)
        # The command may already be on the wire; a client disconnect must not abort it
        task = asyncio.ensure_future(self.dispatcher.dispatch(envelope))
        task.add_done_callback(lambda t: _log_dispatch_completion(t, request.action, fingerprint))
        result = await asyncio.shield(task)
        state = AuthorizationState.DISPATCHED
        logger.debug(f"Gate request key={fingerprint} reached {state.value}")

        return GateOutcome(state=AuthorizationState.DONE, envelope=envelope, dispatch=result)
