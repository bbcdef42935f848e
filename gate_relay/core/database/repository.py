"""
Public Key Repository - registry operations for client public keys.

The gate authorization path only ever calls find_by_key(); the remaining
methods back the development-mode administration routes.
"""
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
import logging

from .models import PublicKey
from gate_relay.core.gate.models import RegisteredKey

logger = logging.getLogger(__name__)


def to_registered_key(record: PublicKey) -> RegisteredKey:
    """Convert a stored row into the boolean-flag trust store view."""
    return RegisteredKey(identifier=record.key, trusted=record.is_trusted)


class KeyAlreadyExistsError(Exception):
    """Key is already registered."""
    pass


class PublicKeyRepository:
    """Repository for the public key registry (implements TrustStore)."""

    def __init__(self, db: Session):
        self.db = db

    def _get(self, key: str) -> Optional[PublicKey]:
        return self.db.query(PublicKey).filter(PublicKey.key == key).first()

    def find_by_key(self, identifier: str) -> Optional[RegisteredKey]:
        """
        Look up a key by its exact identifier string.

        Returns:
            RegisteredKey or None if the key is not registered
        """
        record = self._get(identifier)
        return to_registered_key(record) if record else None

    def list_keys(self) -> List[RegisteredKey]:
        records = self.db.query(PublicKey).order_by(PublicKey.id).all()
        return [to_registered_key(r) for r in records]

    def add_key(self, key: str) -> RegisteredKey:
        """
        Register a new key. New keys always start untrusted.

        Raises:
            KeyAlreadyExistsError: If the key is already registered
        """
        if self._get(key):
            raise KeyAlreadyExistsError(key)

        record = PublicKey(key=key, trusted=0)
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same key
            self.db.rollback()
            raise KeyAlreadyExistsError(key) from e
        logger.info(f"Registered public key id={record.id}")
        return to_registered_key(record)

    def delete_key(self, key: str) -> bool:
        """Delete a key. Returns False if it was not registered."""
        record = self._get(key)
        if not record:
            return False
        record_id = record.id
        self.db.delete(record)
        self.db.commit()
        logger.info(f"Deleted public key id={record_id}")
        return True

    def update_key(self, key: str, trusted: bool) -> Optional[RegisteredKey]:
        """Set the trust flag on a key. Returns None if it was not registered."""
        record = self._get(key)
        if not record:
            return None
        record.trusted = 1 if trusted else 0
        self.db.commit()
        logger.info(f"Updated public key id={record.id} trusted={record.is_trusted}")
        return to_registered_key(record)
