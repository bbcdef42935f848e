"""
FastAPI dependencies for the gate relay.

Gate components are built from settings per request; the shared secret and
gate URL are immutable configuration, so nothing here holds mutable state.
"""
import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from gate_relay.core.config import get_settings
from gate_relay.core.database import get_db, PublicKeyRepository
from gate_relay.core.gate import CommandSigner, GateAuthorizer, RelayDispatcher

logger = logging.getLogger(__name__)

NOT_PRODUCTION_MESSAGE = "Not allowed in production"


async def require_development_mode() -> None:
    """
    Restrict registry administration to development deployments.

    Example:
        @router.get("/publicKey", dependencies=[Depends(require_development_mode)])
        async def list_keys(...):
            ...
    """
    settings = get_settings()
    if not settings.is_development:
        logger.warning(f"Blocked administrative request in {settings.environment} mode")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_PRODUCTION_MESSAGE)


def get_key_repository(db: Session = Depends(get_db)) -> PublicKeyRepository:
    return PublicKeyRepository(db)


def get_command_signer() -> CommandSigner:
    """Raises ConfigurationError when the shared secret is missing."""
    settings = get_settings()
    settings.require_gate_config()
    return CommandSigner(
        secret=settings.gate_hmac_key,
        window_seconds=settings.gate_command_window_seconds,
    )


def get_relay_dispatcher() -> RelayDispatcher:
    """Raises ConfigurationError when the gate URL is missing."""
    settings = get_settings()
    settings.require_gate_config()
    return RelayDispatcher(
        gate_url=settings.gate_url,
        timeout=settings.gate_dispatch_timeout_seconds,
    )


def get_gate_authorizer(
    repository: PublicKeyRepository = Depends(get_key_repository),
    signer: CommandSigner = Depends(get_command_signer),
    dispatcher: RelayDispatcher = Depends(get_relay_dispatcher),
) -> GateAuthorizer:
    return GateAuthorizer(trust_store=repository, signer=signer, dispatcher=dispatcher)
