"""
JSON response helpers.

Every endpoint answers with {"status": "success"|"failed", "message": ...}
plus endpoint-specific fields.
"""
from fastapi import status
from fastapi.responses import JSONResponse

from gate_relay.api.schemas import StatusResponse


def json_response(status_code: int, body: StatusResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def failed_response(status_code: int, message: str) -> JSONResponse:
    return json_response(status_code, StatusResponse(status="failed", message=message))


def unauthorized_response() -> JSONResponse:
    """The single response for every gate authorization failure."""
    return failed_response(status.HTTP_401_UNAUTHORIZED, "Unauthorized")
