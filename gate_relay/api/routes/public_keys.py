"""
Public Key Registry Routes

POST is open so clients can enroll a key; enrolled keys stay untrusted until
an operator flips the flag. Listing, deleting and updating keys are only
reachable in DEVELOPMENT mode.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from gate_relay.api.dependencies import get_key_repository, require_development_mode
from gate_relay.api.responses import failed_response, json_response
from gate_relay.api.schemas import KeyInfo, KeyListResponse, KeyResponse, KeyUpdateResponse
from gate_relay.core.database import KeyAlreadyExistsError, PublicKeyRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/publicKey", tags=["public-keys"])


async def raw_key_body(request: Request) -> str:
    """
    Keys are sent as the raw text body and stored exactly as received.

    Raises:
        HTTPException: 400 if the body is not valid UTF-8
    """
    body = await request.body()
    try:
        return body.decode("utf-8")
    except UnicodeDecodeError:
        logger.info(f"Rejected undecodable key body on {request.method} {request.url.path}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid request")


@router.post("")
def add_public_key(
    key: str = Depends(raw_key_body),
    repository: PublicKeyRepository = Depends(get_key_repository),
):
    """Register a public key (untrusted)."""
    if not key.strip():
        return failed_response(status.HTTP_400_BAD_REQUEST, "Key is required")

    try:
        repository.add_key(key)
    except KeyAlreadyExistsError:
        return failed_response(status.HTTP_409_CONFLICT, "Key already exists")

    return json_response(status.HTTP_200_OK, KeyResponse(status="success", key=key, message="Key added"))


@router.get("", dependencies=[Depends(require_development_mode)])
def list_public_keys(repository: PublicKeyRepository = Depends(get_key_repository)):
    """List all registered keys with their trust flag."""
    keys = repository.list_keys()
    if not keys:
        return failed_response(status.HTTP_404_NOT_FOUND, "No keys found")

    return json_response(
        status.HTTP_200_OK,
        KeyListResponse(
            status="success",
            keys=[KeyInfo(key=k.identifier, trusted=k.trusted) for k in keys],
        ),
    )


@router.delete("", dependencies=[Depends(require_development_mode)])
def delete_public_key(
    key: str = Depends(raw_key_body),
    repository: PublicKeyRepository = Depends(get_key_repository),
):
    """Remove a key from the registry."""
    if not key.strip() or not repository.delete_key(key):
        return failed_response(status.HTTP_404_NOT_FOUND, "Key not found")

    return json_response(status.HTTP_200_OK, KeyResponse(status="success", key=key, message="Key deleted"))


@router.patch("", dependencies=[Depends(require_development_mode)])
def update_public_key(
    update: KeyInfo,
    repository: PublicKeyRepository = Depends(get_key_repository),
):
    """Set a key's trust flag."""
    updated = repository.update_key(update.key, update.trusted)
    if updated is None:
        return failed_response(status.HTTP_404_NOT_FOUND, "Key not found")

    return json_response(
        status.HTTP_200_OK,
        KeyUpdateResponse(
            status="success",
            message="Key updated",
            new_key=KeyInfo(key=updated.identifier, trusted=updated.trusted),
        ),
    )
