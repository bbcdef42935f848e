"""
Registry provisioning (development only)

Every method is routed here so the production guard answers before the
method check does.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from gate_relay.api.dependencies import require_development_mode
from gate_relay.api.responses import failed_response, json_response
from gate_relay.api.schemas import StatusResponse
from gate_relay.core.database import get_db, create_tables

router = APIRouter(tags=["admin"])


@router.api_route(
    "/table",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    dependencies=[Depends(require_development_mode)],
)
def provision_table(request: Request, db: Session = Depends(get_db)):
    """Create the public key table if it does not exist"""
    if request.method != "PUT":
        return failed_response(status.HTTP_405_METHOD_NOT_ALLOWED, "Method Not Allowed")

    create_tables(bind=db.get_bind())
    return json_response(
        status.HTTP_200_OK,
        StatusResponse(status="success", message="Table created or already exists"),
    )
