"""
Relay Dispatcher

Posts a signed envelope to the gate controller exactly once. Failed
dispatches are never retried here: a retry has to go back through the
CommandSigner so the controller sees a new nonce and expiry.
"""
from dataclasses import dataclass
from typing import Optional
import logging

import httpx

from gate_relay.core.errors import DispatchError
from gate_relay.core.gate.models import SignedEnvelope

logger = logging.getLogger(__name__)

DEFAULT_DISPATCH_TIMEOUT_SECONDS = 5.0


@dataclass
class DispatchResult:
    """
    Outcome of a dispatch.

    Attributes:
        ok: Whether the controller returned a 2xx status
        status_code: Controller status code
        body: Controller response body, unmodified
        content_type: Controller Content-Type header, if any
    """
    ok: bool
    status_code: int
    body: bytes = b""
    content_type: Optional[str] = None


class RelayDispatcher:
    """Sends envelopes to the configured gate controller endpoint."""

    def __init__(
        self,
        gate_url: str,
        timeout: float = DEFAULT_DISPATCH_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not gate_url:
            raise ValueError("Gate URL must not be empty")
        self.gate_url = gate_url
        self.timeout = timeout
        self._transport = transport

    async def dispatch(self, envelope: SignedEnvelope) -> DispatchResult:
        """
        POST the envelope to the gate controller.

        Returns:
            DispatchResult carrying the controller's response

        Raises:
            DispatchError: If the controller could not be reached
        """
        action = envelope.value.action.value
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.gate_url, json=envelope.to_payload())
        except httpx.RequestError as e:
            logger.error(f"Gate dispatch failed for {action}: {type(e).__name__}: {e}")
            raise DispatchError(f"Gate unreachable: {type(e).__name__}", cause=e) from e

        if response.is_success:
            logger.info(f"Gate accepted {action} (status={response.status_code})")
        else:
            logger.warning(f"Gate rejected {action}: status={response.status_code}")

        return DispatchResult(
            ok=response.is_success,
            status_code=response.status_code,
            body=response.content,
            content_type=response.headers.get("content-type"),
        )
