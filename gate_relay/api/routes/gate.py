"""
Gate Routes

PATCH /gate - relay a signed OPEN/STOP/CLOSE action to the gate controller.
"""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from gate_relay.api.dependencies import get_gate_authorizer
from gate_relay.api.responses import failed_response, json_response, unauthorized_response
from gate_relay.api.schemas import GateActionRequest, StatusResponse
from gate_relay.core.errors import DispatchError
from gate_relay.core.gate import ActionRequest, GateAuthorizer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gate"])


@router.patch("/gate")
async def send_gate_action(
    payload: GateActionRequest,
    authorizer: GateAuthorizer = Depends(get_gate_authorizer),
):
    """
    Authorize a signed action and forward it to the gate.

    Any authorization failure returns the same 401. A gate controller that
    answers with a non-2xx status has its status and body passed through.
    """
    request = ActionRequest(
        action=payload.action,
        public_key=payload.public_key,
        signature=payload.signature,
    )

    try:
        outcome = await authorizer.handle(request)
    except DispatchError as e:
        logger.error(f"Gate action {request.action.value} not delivered: {e}")
        return failed_response(status.HTTP_502_BAD_GATEWAY, "Gate unreachable")

    if not outcome.authorized:
        return unauthorized_response()

    result = outcome.dispatch
    if not result.ok:
        return Response(
            content=result.body,
            status_code=result.status_code,
            media_type=result.content_type,
        )

    return json_response(
        status.HTTP_200_OK,
        StatusResponse(status="success", message=f"Gate action {request.action.value} sent successfully"),
    )
