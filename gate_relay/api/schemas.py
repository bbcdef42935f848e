"""
Pydantic schemas for FastAPI endpoints
"""
from typing import Optional, List, Literal
from pydantic import BaseModel, ConfigDict, Field

from gate_relay.core.gate.models import GateAction


class GateActionRequest(BaseModel):
    """Signed gate action sent by a client"""
    model_config = ConfigDict(populate_by_name=True)

    signature: str = Field(..., min_length=1, description="Base64 RSA PKCS#1 v1.5 signature over the action")
    action: GateAction = Field(..., description="Requested gate action")
    public_key: str = Field(..., min_length=1, alias="publicKey", description="Base64 SPKI public key")


class StatusResponse(BaseModel):
    """Standard status envelope returned by every endpoint"""
    status: Literal["success", "failed"]
    message: Optional[str] = None


class KeyInfo(BaseModel):
    """Registry entry as exposed by the API"""
    key: str = Field(..., min_length=1)
    trusted: bool


class KeyResponse(StatusResponse):
    key: str


class KeyListResponse(StatusResponse):
    keys: List[KeyInfo]


class KeyUpdateResponse(StatusResponse):
    model_config = ConfigDict(populate_by_name=True)

    new_key: KeyInfo = Field(..., alias="newKey")
